"""Chat screen rendering a session controller."""

import logging
from typing import Optional

import pyperclip
from textual import on, events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import Screen
from textual.widgets import Button, TextArea

from ..config.chat_config import ChatConfig
from ..core.config_paths import ConfigPaths
from ..session import SessionBusyError, SessionController, Status
from ..session.export import export_markdown
from ..ui.chat_widgets import MessageWall
from ..ui.reasoning_timer import ReasoningTimer

logger = logging.getLogger(__name__)


class ChatTextArea(TextArea):
    """Custom TextArea that submits on Enter and inserts newline on Shift+Enter."""

    async def _on_key(self, event: events.Key) -> None:
        """Handle Enter / Shift+Enter to support submissions and newlines."""
        key = event.key.lower()

        if key in {"enter", "return"}:
            event.stop()
            event.prevent_default()
            self.post_message(self.Submitted(self))
            return

        if key in {"shift+enter", "ctrl+j", "newline"}:
            if self.read_only:
                return
            event.stop()
            event.prevent_default()
            self.insert("\n")
            return

        await super()._on_key(event)

    class Submitted(TextArea.Changed):
        """Message sent when user presses Enter."""

        pass


STATUS_LABELS = {
    Status.IDLE: "",
    Status.SUBMITTED: "⏳ Sending...",
    Status.STREAMING: "✍️ Replying...",
    Status.READY: "",
    Status.ERROR: "⚠️ Error",
}


class ChatScreen(Screen):
    """Chat screen driven by a SessionController."""

    DEFAULT_INPUT_TITLE = "Type your message (Enter to send, Shift+Enter for new line)"

    CSS = """
    ChatScreen {
        layout: vertical;
    }

    #chat-container {
        height: 1fr;
        width: 100%;
        padding: 1 2 0 2;
    }

    #chat-log {
        height: 100%;
        width: 100%;
        border: solid $border;
        border-title-align: center;
        padding: 1 2;
        background: $surface;
    }

    #quick-prompts {
        height: auto;
        width: 100%;
        padding: 0 2;
    }

    #quick-prompts .quick-prompt {
        min-width: 0;
        height: 1;
        border: none;
        margin: 0 1 0 0;
    }

    #chat-input {
        width: 100%;
        height: auto;
        max-height: 10;
        margin: 0 2 0 2;
        border: solid $border;
        background: $panel;
    }

    #chat-input:focus {
        border: solid $primary;
    }
    """

    BINDINGS = [
        Binding("ctrl+l", "clear_chat", "Clear Chat"),
        Binding("escape", "stop", "Stop"),
        Binding("ctrl+y", "copy_chat", "Copy Chat"),
        Binding("ctrl+e", "export_session", "Export"),
        Binding("ctrl+r", "toggle_dictation", "Dictate"),
    ]

    def __init__(self, controller: SessionController, config: Optional[ChatConfig] = None):
        """Initialize the chat screen.

        Args:
            controller: Session controller to render and drive
            config: Chat configuration (names, quick prompts)
        """
        super().__init__()
        self.controller = controller
        self.chat_config = config or ChatConfig()
        self.reasoning_timer = ReasoningTimer()
        self.chat_log: Optional[MessageWall] = None
        self.chat_input: Optional[ChatTextArea] = None
        self._shown_error: Optional[str] = None

    def compose(self) -> ComposeResult:
        """Create child widgets for the chat screen."""
        with Container(id="chat-container"):
            yield MessageWall(ai_name=self.chat_config.ai_name, id="chat-log")

        if self.chat_config.quick_prompts:
            with Horizontal(id="quick-prompts"):
                for prompt in self.chat_config.quick_prompts:
                    yield Button(prompt, classes="quick-prompt", name=prompt)

        text_area = ChatTextArea(id="chat-input")
        text_area.show_line_numbers = False
        text_area.border_title = self.DEFAULT_INPUT_TITLE
        yield text_area

    def on_mount(self) -> None:
        """Hydrate the session once the widgets exist."""
        self.chat_log = self.query_one("#chat-log", MessageWall)
        self.chat_input = self.query_one("#chat-input", ChatTextArea)

        self.controller.on_change = self.on_controller_change
        # Greeting (if any) is decided inside hydrate, after the load
        self.controller.hydrate()
        self.on_controller_change(self.controller)

        self.chat_input.focus()

    def on_controller_change(self, controller: SessionController) -> None:
        """Re-render after any controller change."""
        if self.chat_log is None:
            return

        for message_id, part_index, ms in self.reasoning_timer.observe(
            controller.transcript, controller.status
        ):
            controller.record_duration(message_id, part_index, ms)

        self.chat_log.sync(
            controller.transcript, controller.status, controller.duration_map
        )
        self._update_chat_title()

        if self.chat_input is not None:
            self.chat_input.read_only = controller.is_busy
            draft = controller.take_draft()
            if draft:
                self.chat_input.text = draft

        if controller.status is Status.ERROR and controller.last_error != self._shown_error:
            self._shown_error = controller.last_error
            self.notify(f"Error: {controller.last_error}", title="Error", severity="error")
        elif controller.status is not Status.ERROR:
            self._shown_error = None

    def _update_chat_title(self) -> None:
        """Update the chat log border title with status information."""
        title_parts = [self.chat_config.ai_name]
        label = STATUS_LABELS.get(self.controller.status, "")
        if label:
            title_parts.append(label)
        if self.controller.dictating:
            title_parts.append("🎙️ Listening")
        self.chat_log.border_title = " • ".join(title_parts)

    @on(ChatTextArea.Submitted, "#chat-input")
    def on_input_submitted(self, event: ChatTextArea.Submitted) -> None:
        """Handle message submission when Enter is pressed."""
        message = self.chat_input.text.strip()
        if not message:
            return

        if self.controller.is_busy:
            self.notify("Still replying. Press Esc to stop.", severity="warning")
            return

        self.chat_input.clear()
        self.run_worker(self._send(message), exclusive=False)

    async def _send(self, message: str) -> None:
        try:
            await self.controller.send(message)
        except SessionBusyError as e:
            self.notify(str(e), severity="warning")

    @on(Button.Pressed, ".quick-prompt")
    def on_quick_prompt(self, event: Button.Pressed) -> None:
        """Put a suggested prompt into the input."""
        event.stop()
        self.chat_input.text = event.button.name or ""
        self.chat_input.focus()

    def action_stop(self) -> None:
        """Stop the assistant reply, keeping what streamed so far."""
        if self.controller.cancel():
            self.notify("Stopped", severity="information")

    def action_clear_chat(self) -> None:
        """Clear the conversation and its stored copy."""
        self.reasoning_timer.reset()
        self.controller.clear()
        if self.chat_log is not None:
            self.chat_log.clear_messages()
        self._update_chat_title()
        self.notify("Chat cleared", title=self.chat_config.clear_chat_text)

    def _transcript_text(self) -> str:
        lines = []
        for message in self.controller.transcript:
            speaker = "You" if message.role.value == "user" else self.chat_config.ai_name
            lines.append(f"{speaker}: {message.text}")
        return "\n\n".join(lines)

    def action_copy_chat(self) -> None:
        """Copy the entire chat log to clipboard."""
        if not self.controller.transcript:
            self.notify("No messages to copy", title="Info", severity="information")
            return

        try:
            pyperclip.copy(self._transcript_text())
            self.notify(
                f"Copied {len(self.controller.transcript)} messages to clipboard",
                title="Success",
            )
        except pyperclip.PyperclipException as e:
            self.notify(f"Failed to copy: {e}", title="Error", severity="error")

    def action_export_session(self) -> None:
        """Export the conversation to a markdown file."""
        if not self.controller.transcript:
            self.notify("No messages to export", title="Info", severity="information")
            return

        try:
            output_file = ConfigPaths.get_exports_dir() / f"{self.chat_config.storage_key}.md"
            export_markdown(self.controller.snapshot, self.chat_config.ai_name, output_file)
            self.notify(f"Chat exported to {output_file}", title="Export Complete", timeout=10)
        except (IOError, OSError) as e:
            self.notify(f"Failed to export: {e}", title="Error", severity="error")

    def action_toggle_dictation(self) -> None:
        """Start or stop the injected recognizer."""
        if self.controller.recognizer is None:
            self.notify("No dictation engine configured", severity="information")
            return
        if self.controller.dictating:
            self.controller.stop_dictation()
        else:
            self.controller.start_dictation()
