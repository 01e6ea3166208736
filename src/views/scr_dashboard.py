from rich.text import Text
from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Label, LoadingIndicator

from db.models import ProductRecord, Role
from utils.pure import format_price, stock_status
from views.base_screen import BaseScreen
from views.ctl_dashboard import DashboardController, Notification
from views.modal_dialog import ConfirmDeleteModal
from views.modal_product import ProductDialogModal

ADMIN_ACTIONS = {"add_product", "edit_product", "delete_product"}
STOCK_TONE_STYLES = {"error": "bold red", "warning": "yellow", "success": "green"}


class DashboardScreen(BaseScreen):
    """
    Product catalog. Admins additionally get add/edit/delete; for other
    roles those controls are never composed and their bindings are hidden.
    """

    BINDINGS = [
        Binding("a", "add_product", "Add Product", show=True),
        Binding("e", "edit_product", "Edit", show=True),
        Binding("d", "delete_product", "Delete", show=True),
        Binding("r", "reload", "Reload", show=True),
    ]

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Dashboard")
        self.controller = DashboardController(
            self.app.sessions,
            self.app.repository,
            self.show_notification,
            self.confirm,
        )
        self._rows: dict[str, ProductRecord] = {}

    @property
    def is_admin(self) -> bool:
        return self.controller.can_mutate

    def compose(self) -> ComposeResult:
        yield from super().compose()
        session = self.app.sessions.session
        with Vertical(id="div-dashboard"):
            yield Label(f"Welcome, {session.username}!", id="label-welcome")
            yield Label(
                "You have full access to manage products and users."
                if self.is_admin
                else "You can view product information and availability.",
                id="label-welcome-sub",
            )
            yield Label("", id="label-stats")
            with Horizontal(id="div-products-header"):
                yield Label("Product Management", id="label-products-title")
                if self.is_admin:
                    yield Button("Add Product", id="btn-add", variant="primary")
            yield LoadingIndicator(id="loading-products")
            yield DataTable(id="table-products")
            yield Label("", id="label-empty", classes="hidden")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Product Name", "Unit Price", "Quantity", "Status")
        table.focus()
        self.reload_products()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action in ADMIN_ACTIONS:
            return self.is_admin
        return True

    # ---------------------------
    # Controller callbacks
    # ---------------------------

    def show_notification(self, notification: Notification) -> None:
        self.app.notify(notification.message, severity=notification.severity)

    async def confirm(self, caption: str) -> bool:
        return await self.app.push_screen_wait(ConfirmDeleteModal(caption))

    # ---------------------------
    # Rendering
    # ---------------------------

    def render_products(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        self._rows = {}
        for product in self.controller.products:
            status, tone = stock_status(product.quantity)
            table.add_row(
                product.name,
                format_price(product.unit_price),
                str(product.quantity),
                Text(status, style=STOCK_TONE_STYLES[tone]),
                key=product.id,
            )
            self._rows[product.id] = product

        empty = self.query_one("#label-empty", Label)
        if self.controller.products:
            empty.add_class("hidden")
        else:
            empty.update(
                "No products found. "
                + (
                    "Add your first product to get started."
                    if self.is_admin
                    else "Products will appear here once added."
                )
            )
            empty.remove_class("hidden")

        stats = self.controller.stats()
        role = "Admin" if stats.role == Role.ADMIN else "User"
        self.query_one("#label-stats", Label).update(
            f"Total Products: {stats.total_products}   "
            f"Total Stock: {stats.total_stock}   Your Role: {role}"
        )

    def selected_product(self) -> ProductRecord | None:
        table = self.query_one(DataTable)
        if not table.row_count:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self._rows.get(row_key.value)

    # ---------------------------
    # Actions
    # ---------------------------

    @work(exclusive=True, group="load")
    async def reload_products(self) -> None:
        self.query_one("#loading-products").remove_class("hidden")
        try:
            await self.controller.load_products()
        finally:
            self.query_one("#loading-products").add_class("hidden")
        self.render_products()

    def action_reload(self) -> None:
        self.reload_products()

    @on(Button.Pressed, "#btn-add")
    def handle_add(self) -> None:
        self.action_add_product()

    @work(exclusive=True, group="dialog")
    async def action_add_product(self) -> None:
        self.controller.begin_add()
        if await self.app.push_screen_wait(ProductDialogModal(self.controller)):
            self.render_products()

    @work(exclusive=True, group="dialog")
    async def action_edit_product(self) -> None:
        product = self.selected_product()
        if product is None:
            return
        self.controller.begin_edit(product)
        if await self.app.push_screen_wait(ProductDialogModal(self.controller)):
            self.render_products()

    @work(exclusive=True, group="dialog")
    async def action_delete_product(self) -> None:
        product = self.selected_product()
        if product is None or self.controller.saving:
            return
        if await self.controller.delete(product.id):
            self.render_products()
