from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, List, Literal, Optional

from db.models import ProductRecord, Role
from utils.errors import NotFound, RepositoryError, RoleGateError, ValidationError
from utils.logger import get_logger
from utils.state import SessionStore, can_mutate_products
from utils.validation import FIELDS, DraftProduct, check_draft, normalize_draft

if TYPE_CHECKING:
    from db.repository import ProductRepository

_logger = get_logger(__name__)


class NoticeKind(str, Enum):
    FETCH_FAILED = "FetchFailed"
    SAVED = "Saved"
    SAVE_FAILED = "SaveFailed"
    DELETED = "Deleted"
    DELETE_FAILED = "DeleteFailed"


@dataclass(frozen=True)
class Notification:
    kind: NoticeKind
    message: str
    severity: Literal["information", "warning", "error"] = "information"


@dataclass(frozen=True)
class DashboardStats:
    total_products: int
    total_stock: int
    role: Optional[Role]


class DashboardController:
    """
    Fetch/edit/delete/save flows behind the dashboard screen.

    The controller owns the displayed product list and the open draft, and
    reports outcomes through notify. It has no Textual dependency; the
    screen passes app.notify (wrapped) and a confirmation prompt in.

    Mutating entry points are admin-only. The UI never shows them to other
    roles, so reaching one without an admin session raises RoleGateError.
    """

    def __init__(
        self,
        sessions: SessionStore,
        repository: ProductRepository,
        notify: Callable[[Notification], None],
        confirm: Callable[[str], Awaitable[bool]],
    ):
        self.sessions = sessions
        self.repository = repository
        self._notify = notify
        self._confirm = confirm

        self.products: List[ProductRecord] = []
        self.draft: Optional[DraftProduct] = None
        self.loading = False
        self.saving = False

    @property
    def can_mutate(self) -> bool:
        return can_mutate_products(self.sessions.session)

    def _require_admin(self, action: str) -> None:
        if not self.can_mutate:
            role = self.sessions.role.value if self.sessions.role else "anonymous"
            _logger.error(f"{action} invoked for role {role}, the UI should not expose it")
            raise RoleGateError(f"{action} requires an admin session (role: {role})")

    def stats(self) -> DashboardStats:
        return DashboardStats(
            total_products=len(self.products),
            total_stock=sum(p.quantity for p in self.products),
            role=self.sessions.role,
        )

    async def load_products(self) -> bool:
        """
        Re-fetch the whole list. On failure the previous list stays on screen.
        """
        self.loading = True
        try:
            products = await self.repository.list_products()
        except RepositoryError as e:
            _logger.error(f"Error fetching products: {e}")
            self._notify(
                Notification(NoticeKind.FETCH_FAILED, "Failed to fetch products", "error")
            )
            return False
        finally:
            self.loading = False

        self.products = products
        return True

    # ---------------------------
    # Draft dialog
    # ---------------------------

    def begin_add(self) -> DraftProduct:
        self._require_admin("begin_add")
        self.draft = DraftProduct()
        return self.draft

    def begin_edit(self, record: ProductRecord) -> DraftProduct:
        self._require_admin("begin_edit")
        self.draft = DraftProduct.from_record(record)
        return self.draft

    def edit_field(self, field: str, value: str) -> dict:
        """Update one draft field and re-validate the whole draft."""
        if self.draft is None:
            raise RuntimeError("No product dialog is open.")
        if field not in FIELDS:
            raise ValueError(f"Unknown product field {field!r}")
        setattr(self.draft, field, value)
        self.draft.errors = check_draft(self.draft)
        return self.draft.errors

    def cancel(self) -> None:
        self.draft = None

    async def save(self, draft: Optional[DraftProduct] = None) -> bool:
        """
        Validate and submit the draft. True when persisted and the dialog
        closed; False when invalid or when the repository refused, in which
        case the draft stays open for another attempt.
        """
        self._require_admin("save")
        draft = draft or self.draft
        if draft is None:
            raise RuntimeError("No product dialog is open.")
        self.draft = draft

        try:
            data = normalize_draft(draft)
        except ValidationError as e:
            draft.errors = e.errors
            return False
        draft.errors = {}

        self.saving = True
        try:
            if draft.is_edit:
                await self.repository.update_product(draft.product_id, data)
            else:
                await self.repository.create_product(data)
        except RepositoryError as e:
            verb = "update" if draft.is_edit else "create"
            if isinstance(e, NotFound):
                _logger.warning(f"Product {draft.product_id} no longer exists")
            _logger.error(f"Error saving product: {e}")
            self._notify(
                Notification(NoticeKind.SAVE_FAILED, f"Failed to {verb} product", "error")
            )
            return False
        finally:
            self.saving = False

        verb = "updated" if draft.is_edit else "created"
        self.draft = None
        self._notify(Notification(NoticeKind.SAVED, f"Product {verb} successfully"))
        await self.load_products()
        return True

    async def delete(self, product_id: str) -> bool:
        self._require_admin("delete")
        if not await self._confirm("Are you sure you want to delete this product?"):
            return False

        self.saving = True
        try:
            await self.repository.delete_product(product_id)
        except RepositoryError as e:
            _logger.error(f"Error deleting product: {e}")
            self._notify(
                Notification(NoticeKind.DELETE_FAILED, "Failed to delete product", "error")
            )
            return False
        finally:
            self.saving = False

        self._notify(Notification(NoticeKind.DELETED, "Product deleted successfully"))
        await self.load_products()
        return True
