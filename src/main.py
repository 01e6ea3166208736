from dotenv import load_dotenv

load_dotenv()

from textual import on, work  # noqa: E402
from textual.app import App, ComposeResult  # noqa: E402
from textual.binding import Binding  # noqa: E402
from textual.widgets import LoadingIndicator  # noqa: E402

from db.repository import open_repository  # noqa: E402
from utils.config import AppConfig, load_config  # noqa: E402
from utils.logger import get_logger  # noqa: E402
from utils.messages import QuitRequestedMessage, UserLogoutMessage  # noqa: E402
from utils.state import SessionStore  # noqa: E402
from utils.storage import LocalStorage  # noqa: E402
from views.scr_dashboard import DashboardScreen  # noqa: E402
from views.scr_signin import SignInScreen  # noqa: E402

_logger = get_logger(__name__)


class InvMgrApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    CSS_PATH = [
        "views/styles/index.tcss",
        "views/styles/signin.tcss",
        "views/styles/dashboard.tcss",
    ]

    def __init__(self, config: AppConfig | None = None):
        super().__init__()
        self.config = config or load_config()
        self.repository = open_repository(self.config)
        self.sessions = SessionStore(self.repository, LocalStorage(self.config.storage_path))

    def compose(self) -> ComposeResult:
        # shown while the persisted session is restored
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.sessions.restore()
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        self.sessions.sign_out()
        while len(self.screen_stack) > 1:
            await self.pop_screen()
        self.notify("Signed out successfully")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.repository.close()
        self.exit()

    @work(exclusive=True, group="routing")
    async def main_flow(self):
        # the dashboard requires a session; without one, sign in first
        if self.sessions.session is None:
            await self.push_screen_wait(SignInScreen())
        _logger.info(f"Opening dashboard for {self.sessions.session.username}")
        await self.push_screen(DashboardScreen())


def main() -> None:
    InvMgrApp().run()


if __name__ == "__main__":
    main()
