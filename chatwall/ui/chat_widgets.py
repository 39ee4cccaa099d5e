"""Custom widgets for chat messages with copy functionality."""

import json
from typing import Dict, Optional

import pyperclip
from rich.console import Group, RenderableType
from rich.markdown import Markdown
from rich.text import Text
from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widget import Widget
from textual.widgets import Button, Static

from ..session.export import format_duration
from ..session.models import Message, PartKind, Role, Status, duration_key
from .reasoning_timer import streaming_segment


def render_parts(
    message: Message,
    durations: Optional[Dict[str, int]] = None,
    streaming_index: Optional[int] = None,
) -> RenderableType:
    """Build a Rich renderable for an assistant message.

    Args:
        message: Message to render
        durations: Duration map used to label finished reasoning
        streaming_index: Index of the part still streaming, if any

    Returns:
        A renderable group, one entry per part
    """
    durations = durations or {}
    renderables = []
    for index, part in enumerate(message.parts):
        if part.kind is PartKind.TEXT:
            renderables.append(Markdown(part.content or ""))
        elif part.kind is PartKind.REASONING:
            if index == streaming_index:
                header = "💭 Thinking…"
            else:
                header = f"💭 {format_duration(durations.get(duration_key(message.id, index)))}"
            renderables.append(Text(header, style="bold dim"))
            if part.content:
                renderables.append(Text(part.content, style="dim italic"))
        elif part.kind is PartKind.TOOL_CALL:
            args = ", ".join(f"{k}={v!r}" for k, v in part.args.items())
            renderables.append(Text(f"🔧 {part.name}({args})", style="bold yellow"))
        elif part.kind is PartKind.TOOL_RESULT:
            output = part.output if isinstance(part.output, str) else json.dumps(
                part.output, default=str
            )
            renderables.append(Text(f"↳ {output}", style="yellow"))
    return Group(*renderables)


class CopyableMessage(Vertical):
    """A message with a header and a copy button."""

    DEFAULT_CSS = """
    CopyableMessage {
        width: 100%;
        height: auto;
        margin: 0 0 1 0;
        border: solid $border;
        background: $surface;
    }

    CopyableMessage.ai-message {
        border: solid $accent;
    }

    CopyableMessage .message-header {
        layout: horizontal;
        width: 100%;
        height: auto;
        padding: 0 1;
        background: $boost;
    }

    CopyableMessage .message-title {
        width: 1fr;
        content-align: left middle;
        padding: 0 1;
    }

    CopyableMessage .copy-button {
        min-width: 10;
        height: auto;
        padding: 0 1;
        margin: 0;
    }

    CopyableMessage .message-content {
        width: 100%;
        padding: 1 2;
    }
    """

    def __init__(
        self,
        title: str,
        content: str,
        message_type: str = "ai",
        **kwargs,
    ):
        """Initialize a copyable message.

        Args:
            title: Header text
            content: Plain text placed on the clipboard by the copy button
            message_type: Type of message (ai, user)
            **kwargs: Additional arguments
        """
        if "classes" in kwargs:
            kwargs["classes"] = f"{kwargs['classes']} {message_type}-message"
        else:
            kwargs["classes"] = f"{message_type}-message"

        super().__init__(**kwargs)
        self.message_title = str(title) if title is not None else ""
        self.message_content = str(content) if content is not None else ""
        self.message_type = message_type

    def compose(self) -> ComposeResult:
        """Compose the message widget."""
        with Horizontal(classes="message-header"):
            yield Static(self.message_title, classes="message-title")
            yield Button("📋 Copy", classes="copy-button", variant="primary")
        yield from self.compose_content()

    def compose_content(self) -> ComposeResult:
        """Compose the message body; subclasses override for rich content."""
        yield Static(self.message_content, classes="message-content", markup=False)

    @on(Button.Pressed, ".copy-button")
    def copy_message(self, event: Button.Pressed) -> None:
        """Handle copy button press."""
        event.stop()  # Prevent event from bubbling
        try:
            pyperclip.copy(self.message_content)
            self.app.notify("Message copied to clipboard", title="Success")
        except pyperclip.PyperclipException as e:
            self.app.notify(f"Failed to copy: {e}", title="Error", severity="error")


class AssistantMessage(CopyableMessage):
    """Assistant message whose parts re-render as they stream."""

    def __init__(
        self,
        message: Message,
        ai_name: str = "Assistant",
        durations: Optional[Dict[str, int]] = None,
        streaming_index: Optional[int] = None,
        **kwargs,
    ):
        """Initialize an assistant message.

        Args:
            message: Transcript message to display
            ai_name: Name shown in the header
            durations: Duration map for reasoning labels
            streaming_index: Index of the part still streaming, if any
            **kwargs: Additional arguments
        """
        self.message = message
        self.durations = dict(durations or {})
        self.streaming_index = streaming_index
        super().__init__(
            title=f"🤖 {ai_name}",
            content=message.text,
            message_type="ai",
            **kwargs,
        )

    def compose_content(self) -> ComposeResult:
        yield Static(
            render_parts(self.message, self.durations, self.streaming_index),
            classes="message-content",
        )

    def update_message(
        self,
        message: Message,
        durations: Dict[str, int],
        streaming_index: Optional[int],
    ) -> None:
        """Re-render after the message grew or its durations changed."""
        durations = dict(durations)
        if (
            message == self.message
            and durations == self.durations
            and streaming_index == self.streaming_index
        ):
            return
        self.message = message
        self.durations = durations
        self.streaming_index = streaming_index
        self.message_content = message.text
        if self.is_mounted:
            self.query_one(".message-content", Static).update(
                render_parts(message, durations, streaming_index)
            )


class UserMessage(Horizontal):
    """Simple user message display."""

    DEFAULT_CSS = """
    UserMessage {
        width: 100%;
        height: auto;
        padding: 1 2;
        margin: 0 0 1 0;
        background: $panel;
        border-left: thick $primary;
    }

    UserMessage .user-label {
        color: $primary;
        text-style: bold;
        width: auto;
    }

    UserMessage .user-content {
        width: 1fr;
    }
    """

    def __init__(self, content: str, **kwargs):
        """Initialize a user message.

        Args:
            content: User message content
            **kwargs: Additional arguments
        """
        self.message_content = str(content) if content is not None else ""
        super().__init__(**kwargs)

    def compose(self) -> ComposeResult:
        """Compose the user message widget."""
        yield Static("You: ", classes="user-label")
        yield Static(self.message_content, classes="user-content", markup=False)


class MessageWall(VerticalScroll):
    """Scrolling list with one widget per transcript message."""

    def __init__(self, ai_name: str = "Assistant", **kwargs):
        super().__init__(**kwargs)
        self.ai_name = ai_name
        self._widgets: Dict[str, Widget] = {}

    def sync(
        self,
        transcript,
        status: Status,
        durations: Dict[str, int],
    ) -> None:
        """Bring the mounted widgets in line with the transcript."""
        live_ids = {message.id for message in transcript}
        for message_id in [mid for mid in self._widgets if mid not in live_ids]:
            self._widgets.pop(message_id).remove()

        streaming = streaming_segment(transcript, status)
        added = False
        for message in transcript:
            streaming_index = (
                streaming[1] if streaming and streaming[0] == message.id else None
            )
            widget = self._widgets.get(message.id)
            if widget is None:
                if message.role is Role.USER:
                    widget = UserMessage(content=message.text)
                else:
                    widget = AssistantMessage(
                        message,
                        ai_name=self.ai_name,
                        durations=durations,
                        streaming_index=streaming_index,
                    )
                self._widgets[message.id] = widget
                self.mount(widget)
                added = True
            elif isinstance(widget, AssistantMessage):
                widget.update_message(message, durations, streaming_index)

        if added or status is Status.STREAMING:
            self.scroll_end(animate=False)

    def clear_messages(self) -> None:
        """Remove every message widget."""
        self._widgets.clear()
        self.remove_children()
