import json
import os
import sys
import unittest
from unittest import mock

import requests

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.hosted import HostedRepository  # noqa: E402
from db.models import ProductInput  # noqa: E402
from utils.errors import NotFound, RepositoryError  # noqa: E402

URL = "https://example.supabase.co"

ROW = {
    "id": "7f0c",
    "nama_produk": "Stapler",
    "harga_satuan": 32000,
    "quantity": 4,
    "created_at": "2025-01-04T08:00:00.123456+00:00",
    "updated_at": "2025-01-04T09:00:00+00:00",
}


def make_response(status, body=None):
    resp = requests.Response()
    resp.status_code = status
    resp._content = b"" if body is None else json.dumps(body).encode()
    resp.headers["Content-Type"] = "application/json"
    return resp


class HostedRepositoryTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.repo = HostedRepository(URL + "/", "anon-key", timeout=3)
        patcher = mock.patch.object(requests.Session, "request")
        self.request = patcher.start()
        self.addCleanup(patcher.stop)

    def sent(self):
        args, kwargs = self.request.call_args
        return args[0], args[1], kwargs

    def test_auth_headers(self):
        self.assertEqual(self.repo.base_url, URL + "/rest/v1")
        self.assertEqual(self.repo._http.headers["apikey"], "anon-key")
        self.assertEqual(self.repo._http.headers["Authorization"], "Bearer anon-key")

    async def test_list_products(self):
        self.request.return_value = make_response(200, [ROW])
        products = await self.repo.list_products()

        method, url, kwargs = self.sent()
        self.assertEqual((method, url), ("GET", URL + "/rest/v1/products"))
        self.assertEqual(kwargs["params"], {"select": "*", "order": "created_at.desc"})
        self.assertEqual(kwargs["timeout"], 3)

        self.assertEqual(len(products), 1)
        p = products[0]
        self.assertEqual((p.id, p.name, p.unit_price, p.quantity), ("7f0c", "Stapler", 32000.0, 4))
        self.assertEqual(p.created_at.microsecond, 123456)

    async def test_http_error_is_repository_error(self):
        self.request.return_value = make_response(401, {"message": "Invalid API key"})
        with self.assertRaises(RepositoryError):
            await self.repo.list_products()

    async def test_transport_error_is_repository_error(self):
        self.request.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(RepositoryError):
            await self.repo.list_products()

    async def test_unexpected_row_is_repository_error(self):
        self.request.return_value = make_response(200, [{"id": "x"}])
        with self.assertRaises(RepositoryError):
            await self.repo.list_products()

    async def test_create_product(self):
        self.request.return_value = make_response(201, [ROW])
        record = await self.repo.create_product(
            ProductInput(name="Stapler", unit_price=32000.0, quantity=4)
        )
        method, _, kwargs = self.sent()
        self.assertEqual(method, "POST")
        self.assertEqual(
            kwargs["json"], [{"nama_produk": "Stapler", "harga_satuan": 32000.0, "quantity": 4}]
        )
        self.assertEqual(kwargs["headers"], {"Prefer": "return=representation"})
        self.assertEqual(record.id, "7f0c")

    async def test_update_product(self):
        self.request.return_value = make_response(200, [ROW])
        await self.repo.update_product(
            "7f0c", ProductInput(name="Stapler", unit_price=32000.0, quantity=4)
        )
        method, _, kwargs = self.sent()
        self.assertEqual(method, "PATCH")
        self.assertEqual(kwargs["params"], {"id": "eq.7f0c"})

    async def test_update_missing_is_not_found(self):
        self.request.return_value = make_response(200, [])
        with self.assertRaises(NotFound):
            await self.repo.update_product(
                "gone", ProductInput(name="x", unit_price=1.0, quantity=1)
            )

    async def test_delete_product(self):
        self.request.return_value = make_response(200, [ROW])
        await self.repo.delete_product("7f0c")
        method, _, kwargs = self.sent()
        self.assertEqual(method, "DELETE")
        self.assertEqual(kwargs["params"], {"id": "eq.7f0c"})

        self.request.return_value = make_response(200, [])
        with self.assertRaises(NotFound):
            await self.repo.delete_product("7f0c")

    async def test_find_user(self):
        self.request.return_value = make_response(
            200, {"id": "a-1", "username": "admin1", "password": "adminpassword", "role": "admin"}
        )
        user = await self.repo.find_user_by_username("admin1")
        _, url, kwargs = self.sent()
        self.assertEqual(url, URL + "/rest/v1/users")
        self.assertEqual(kwargs["params"]["username"], "eq.admin1")
        self.assertEqual(kwargs["headers"]["Accept"], "application/vnd.pgrst.object+json")
        self.assertEqual((user.id, user.role), ("a-1", "admin"))

    async def test_find_user_no_rows_is_none(self):
        self.request.return_value = make_response(
            406, {"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"}
        )
        self.assertIsNone(await self.repo.find_user_by_username("nobody"))

    async def test_find_user_other_error_raises(self):
        self.request.return_value = make_response(500, {"code": "XX000"})
        with self.assertRaises(RepositoryError):
            await self.repo.find_user_by_username("user1")


if __name__ == "__main__":
    unittest.main()
