from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, Static

from utils.errors import AuthError
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal

DEMO_CREDENTIALS_HINT = (
    "Demo Credentials:\n"
    "  User:  user1 / password123\n"
    "  Admin: admin1 / adminpassword"
)


class SignInScreen(BaseScreen):
    """
    Public route. Dismisses once a session has been established.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Sign In", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-login"):
            yield Label("Welcome Back", id="label-login-title")
            yield Label("Sign in to access your dashboard")
            yield Label("Username")
            yield Input(placeholder="Enter your username", id="input-login-username")
            yield Label("Password")
            yield Input(
                placeholder="Enter your password", password=True, id="input-login-pwd"
            )
            yield Label("", id="label-login-error", classes="hidden")
            with Horizontal(id="div-login-btns"):
                yield Button("Quit", id="btn-quit")
                yield Button("Sign In", id="btn-login", variant="primary")
            yield Static(DEMO_CREDENTIALS_HINT, id="static-demo-credentials")

    def on_mount(self):
        self.query_one("#input-login-username").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()

    def show_error(self, message: str) -> None:
        label = self.query_one("#label-login-error", Label)
        label.update(message)
        label.remove_class("hidden")

    def set_busy(self, busy: bool) -> None:
        btn = self.query_one("#btn-login", Button)
        btn.disabled = busy
        btn.label = "Signing in..." if busy else "Sign In"
        for input_ in self.query(Input):
            input_.disabled = busy

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        self.query_one("#label-login-error").add_class("hidden")
        username = self.query_one("#input-login-username", Input).value
        pwd = self.query_one("#input-login-pwd", Input).value

        if not username.strip() or not pwd.strip():
            self.show_error("Please fill in all fields")
            return

        self.set_busy(True)
        try:
            session = await self.app.sessions.sign_in(username, pwd)
        except AuthError as e:
            self.set_busy(False)
            self.show_error(str(e))
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            return

        self.notify(f"Sign in successful! Hello {session.username}.")
        self.dismiss()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
