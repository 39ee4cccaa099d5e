"""Main application module for chatwall."""

import logging
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from .config.chat_config import ChatConfig, load_chat_config
from .config.settings_manager import get_setting, set_settings, validate_theme
from .screens.chat_screen import ChatScreen
from .services.recognition import Recognizer
from .services.transport import GeminiTransport, Transport
from .session import PersistenceGate, SessionController, WelcomeInjector

logger = logging.getLogger(__name__)


def build_controller(
    config: ChatConfig,
    transport: Optional[Transport] = None,
    recognizer: Optional[Recognizer] = None,
) -> SessionController:
    """Wire a session controller from configuration.

    Args:
        config: Chat configuration
        transport: Assistant backend (None leaves sends failing with an error status)
        recognizer: Optional dictation engine

    Returns:
        An unhydrated SessionController
    """
    welcome = WelcomeInjector(config.welcome_message) if config.welcome_enabled else None
    return SessionController(
        gate=PersistenceGate.for_key(config.storage_key),
        transport=transport,
        welcome=welcome,
        recognizer=recognizer,
    )


class ChatWallApp(App):
    """chatwall TUI application."""

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+d", "toggle_dark", "Toggle Dark Mode"),
    ]

    def __init__(
        self,
        config: Optional[ChatConfig] = None,
        transport: Optional[Transport] = None,
        recognizer: Optional[Recognizer] = None,
    ):
        """Initialize the application.

        Args:
            config: Chat configuration (loaded from config.json if omitted)
            transport: Assistant backend (Gemini if omitted)
            recognizer: Optional dictation engine
        """
        super().__init__()
        self.chat_config = config or load_chat_config()
        self.title = self.chat_config.ai_name
        self.sub_title = f"by {self.chat_config.owner_name}"
        self.theme = self.chat_config.theme

        self._transport_error: Optional[str] = None
        if transport is None:
            transport = self._create_transport()
        self.controller = build_controller(self.chat_config, transport, recognizer)

    def _create_transport(self) -> Optional[Transport]:
        """Create the Gemini transport, remembering why it failed if it did."""
        try:
            return GeminiTransport(self.chat_config, api_key=get_setting("api_key"))
        except ValueError as e:
            logger.warning(f"Assistant unavailable: {e}")
            self._transport_error = str(e)
            return None

    def compose(self) -> ComposeResult:
        """Create child widgets for the app."""
        yield Header()
        yield Footer()

    def on_mount(self) -> None:
        """Push the chat screen and surface startup problems."""
        self.push_screen(ChatScreen(self.controller, self.chat_config))
        if self._transport_error:
            self.notify(
                f"Failed to initialize assistant: {self._transport_error}",
                severity="error",
            )

    def action_toggle_dark(self) -> None:
        """Toggle dark mode and persist the choice."""
        new_theme = "textual-dark" if self.theme == "textual-light" else "textual-light"
        self.theme = new_theme
        if validate_theme(new_theme):
            set_settings({"theme": new_theme})
