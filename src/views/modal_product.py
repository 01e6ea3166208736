from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from views.ctl_dashboard import DashboardController

# field -> (label, placeholder)
_FIELDS = {
    "name": ("Product Name", "Enter product name"),
    "unit_price": ("Unit Price (IDR)", "Enter unit price"),
    "quantity": ("Quantity", "Enter quantity"),
}


class ProductDialogModal(ModalScreen[bool]):
    """
    Add/edit form over the controller's open draft.
    Returns True if the product was saved, False if cancelled.
    """

    def __init__(self, controller: DashboardController) -> None:
        super().__init__()
        self.controller = controller
        self.draft = controller.draft

    def compose(self) -> ComposeResult:
        editing = self.draft.is_edit
        with Vertical(id="div-product-dialog"):
            yield Label(
                "Edit Product" if editing else "Add New Product", id="label-dialog-title"
            )
            yield Label(
                "Update the product information below."
                if editing
                else "Fill in the details to add a new product to your inventory."
            )
            for field, (label, placeholder) in _FIELDS.items():
                yield Label(label)
                yield Input(
                    value=getattr(self.draft, field),
                    placeholder=placeholder,
                    id=f"input-{field}",
                )
                yield Label("", id=f"error-{field}", classes="field-error hidden")
            with Horizontal(id="div-dialog-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button(
                    "Update Product" if editing else "Add Product",
                    id="btn-save",
                    variant="primary",
                )

    def on_mount(self) -> None:
        self.query_one("#input-name").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape" and not self.controller.saving:
            self.handle_cancel()

    def render_errors(self) -> None:
        for field in _FIELDS:
            message = self.draft.errors.get(field, "")
            label = self.query_one(f"#error-{field}", Label)
            label.update(message)
            label.set_class(not message, "hidden")
            self.query_one(f"#input-{field}", Input).set_class(bool(message), "-invalid")

    def set_busy(self, busy: bool) -> None:
        save = self.query_one("#btn-save", Button)
        save.disabled = busy
        if busy:
            save.label = "Saving..."
        else:
            save.label = "Update Product" if self.draft.is_edit else "Add Product"
        self.query_one("#btn-cancel", Button).disabled = busy
        for input_ in self.query(Input):
            input_.disabled = busy

    def on_input_changed(self, message: Input.Changed) -> None:
        field = message.input.id.removeprefix("input-")
        # initial values also fire Changed; only react to typing
        if (
            field in _FIELDS
            and self.focused == message.input
            and self.controller.draft is self.draft
        ):
            self.controller.edit_field(field, message.value)
            self.render_errors()

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.controller.cancel()
        self.dismiss(False)

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        self.set_busy(True)
        try:
            saved = await self.controller.save(self.draft)
        finally:
            self.set_busy(False)

        if saved:
            self.dismiss(True)
        else:
            # invalid, or the repository refused; keep everything typed so far
            self.render_errors()
