import json
import os
import sys
import tempfile
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.models import Role, Session, User  # noqa: E402
from utils.errors import AuthUnavailable, InvalidCredentials, RepositoryError  # noqa: E402
from utils.state import (  # noqa: E402
    SESSION_STORAGE_KEY,
    SessionState,
    SessionStore,
    can_mutate_products,
)
from utils.storage import LocalStorage  # noqa: E402


class FakeCredentials:
    """in-memory credential repository that counts lookups"""

    def __init__(self, users=None, fail=False):
        self.users = {u.username: u for u in (users or [])}
        self.fail = fail
        self.calls = 0

    async def find_user_by_username(self, username):
        self.calls += 1
        if self.fail:
            raise RepositoryError("connection refused")
        return self.users.get(username)


DEMO_USERS = [
    User(id="u-1", username="user1", password="password123", role="user"),
    User(id="a-1", username="admin1", password="adminpassword", role="admin"),
    # present in the store but not on the allow-list
    User(id="u-2", username="user2", password="secret", role="user"),
]


class SessionStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.storage_path = os.path.join(self.temp_dir.name, "storage.json")
        self.storage = LocalStorage(self.storage_path)
        self.credentials = FakeCredentials(DEMO_USERS)
        self.store = SessionStore(self.credentials, self.storage)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_starts_loading_until_restore(self):
        self.assertEqual(self.store.state, SessionState.LOADING)
        self.assertIsNone(self.store.restore())
        self.assertEqual(self.store.state, SessionState.ANONYMOUS)

    async def test_unknown_username_is_invalid(self):
        for username in ["nobody", "", "USER1", "admin"]:
            with self.subTest(username=username):
                with self.assertRaises(InvalidCredentials):
                    await self.store.sign_in(username, "password123")
                self.assertIsNone(self.store.session)
                self.assertEqual(self.store.state, SessionState.ANONYMOUS)
        self.assertIsNone(self.storage.get_item(SESSION_STORAGE_KEY))

    async def test_demo_accounts_sign_in_with_their_roles(self):
        session = await self.store.sign_in("user1", "password123")
        self.assertEqual(session, Session(id="u-1", username="user1", role=Role.USER))
        self.assertEqual(self.store.state, SessionState.AUTHENTICATED)

        session = await self.store.sign_in("admin1", "adminpassword")
        self.assertEqual(session.role, Role.ADMIN)
        self.assertEqual(session.id, "a-1")
        self.assertTrue(self.store.is_admin)

    async def test_wrong_password_fails(self):
        for username, pwd in [
            ("user1", "Password123"),
            ("user1", "password123 "),
            ("user1", "adminpassword"),
            ("admin1", "password123"),
            ("admin1", ""),
        ]:
            with self.subTest(username=username, pwd=pwd):
                with self.assertRaises(InvalidCredentials):
                    await self.store.sign_in(username, pwd)
                self.assertIsNone(self.store.session)

    async def test_user_outside_allow_list_fails(self):
        with self.assertRaises(InvalidCredentials):
            await self.store.sign_in("user2", "secret")

    async def test_repository_failure_is_auth_unavailable(self):
        store = SessionStore(FakeCredentials(DEMO_USERS, fail=True), self.storage)
        with self.assertRaises(AuthUnavailable) as ctx:
            await store.sign_in("user1", "password123")
        self.assertEqual(str(ctx.exception), "Database connection error")
        self.assertEqual(store.state, SessionState.ANONYMOUS)

    async def test_failed_sign_in_drops_existing_session(self):
        await self.store.sign_in("admin1", "adminpassword")
        with self.assertRaises(InvalidCredentials):
            await self.store.sign_in("admin1", "wrong")
        self.assertEqual(self.store.state, SessionState.ANONYMOUS)
        self.assertIsNone(self.store.session)
        self.assertFalse(can_mutate_products(self.store.session))
        self.assertIsNone(self.storage.get_item(SESSION_STORAGE_KEY))

        await self.store.sign_in("admin1", "adminpassword")
        self.credentials.fail = True
        with self.assertRaises(AuthUnavailable):
            await self.store.sign_in("admin1", "adminpassword")
        self.assertIsNone(self.store.session)
        self.assertFalse(self.store.is_admin)

    async def test_sign_in_persists_session(self):
        await self.store.sign_in("admin1", "adminpassword")
        raw = self.storage.get_item(SESSION_STORAGE_KEY)
        self.assertEqual(
            json.loads(raw), {"id": "a-1", "username": "admin1", "role": "admin"}
        )

    async def test_restore_after_reload_reproduces_session(self):
        signed_in = await self.store.sign_in("user1", "password123")
        calls = self.credentials.calls

        # simulated reload: fresh storage handle and store on the same file
        reloaded = SessionStore(self.credentials, LocalStorage(self.storage_path))
        restored = reloaded.restore()

        self.assertEqual(restored, signed_in)
        self.assertEqual(reloaded.session, signed_in)
        self.assertEqual(reloaded.state, SessionState.AUTHENTICATED)
        self.assertEqual(self.credentials.calls, calls)

    def test_malformed_persisted_session_is_discarded(self):
        for raw in [
            "{not json",
            "[1, 2]",
            json.dumps({"id": "u-1", "username": "user1"}),
            json.dumps({"id": "u-1", "username": "user1", "role": "superuser"}),
            json.dumps({"id": 1, "username": "user1", "role": "user"}),
        ]:
            with self.subTest(raw=raw):
                self.storage.set_item(SESSION_STORAGE_KEY, raw)
                store = SessionStore(self.credentials, self.storage)
                self.assertIsNone(store.restore())
                self.assertEqual(store.state, SessionState.ANONYMOUS)
                self.assertIsNone(self.storage.get_item(SESSION_STORAGE_KEY))

    async def test_sign_out_clears_and_is_idempotent(self):
        await self.store.sign_in("user1", "password123")
        self.store.sign_out()
        self.assertIsNone(self.store.session)
        self.assertEqual(self.store.state, SessionState.ANONYMOUS)
        self.assertIsNone(self.storage.get_item(SESSION_STORAGE_KEY))

        self.store.sign_out()
        self.assertIsNone(self.store.session)

        reloaded = SessionStore(self.credentials, LocalStorage(self.storage_path))
        self.assertIsNone(reloaded.restore())


class CapabilityTestCase(unittest.TestCase):
    def test_only_admin_can_mutate(self):
        self.assertTrue(can_mutate_products(Session("a-1", "admin1", Role.ADMIN)))
        self.assertFalse(can_mutate_products(Session("u-1", "user1", Role.USER)))
        self.assertFalse(can_mutate_products(None))


class LocalStorageTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.temp_dir.name, "nested", "storage.json")

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_set_get_remove(self):
        storage = LocalStorage(self.path)
        self.assertIsNone(storage.get_item("user"))
        storage.set_item("user", "value")
        storage.set_item("other", "x")
        self.assertEqual(LocalStorage(self.path).get_item("user"), "value")

        storage.remove_item("user")
        storage.remove_item("user")
        self.assertIsNone(storage.get_item("user"))
        self.assertEqual(storage.get_item("other"), "x")

    def test_corrupt_file_reads_as_empty(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("garbage")
        storage = LocalStorage(self.path)
        self.assertIsNone(storage.get_item("user"))
        storage.set_item("user", "v")
        self.assertEqual(storage.get_item("user"), "v")


if __name__ == "__main__":
    unittest.main()
