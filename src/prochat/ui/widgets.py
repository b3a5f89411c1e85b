"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Chat list rendering and selection
- Chat message rendering
- Input buffer handling and submit keys
- Status line and log rendering
"""

from collections.abc import Sequence
from datetime import datetime

from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Label, ListItem, ListView, Markdown, RichLog, Static, TextArea

from ..chat.models import Chat, Message, Status
from ..config import LOG_TIMESTAMP_FORMAT, LogLevel


class ChatListItem(ListItem):
    """Sidebar row for one chat."""

    def __init__(self, chat: Chat, active: bool = False) -> None:
        super().__init__(
            Label(chat.title),
            classes="-active-chat" if active else "",
        )
        self.chat_id = chat.id


class ChatListPanel(ListView):
    """Sidebar listing chats, most recent first."""

    BORDER_TITLE = "Chats"

    BINDINGS = [
        ("delete", "delete_chat", "Delete Chat"),
    ]

    class ChatSelected(TextualMessage):
        """A chat was picked in the sidebar."""

        def __init__(self, chat_id: str) -> None:
            super().__init__()
            self.chat_id = chat_id

    class DeleteRequested(TextualMessage):
        """The user asked to delete the highlighted chat."""

        def __init__(self, chat_id: str) -> None:
            super().__init__()
            self.chat_id = chat_id

    async def set_chats(self, chats: Sequence[Chat], active_id: str | None) -> None:
        """Rebuild the list and highlight the active chat."""
        await self.clear()
        if chats:
            await self.extend(ChatListItem(chat, chat.id == active_id) for chat in chats)
        positions = [i for i, chat in enumerate(chats) if chat.id == active_id]
        self.index = positions[0] if positions else None
        self.border_subtitle = f"{len(chats)}"

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        event.stop()
        if isinstance(event.item, ChatListItem):
            self.post_message(self.ChatSelected(event.item.chat_id))

    def action_delete_chat(self) -> None:
        item = self.highlighted_child
        if isinstance(item, ChatListItem):
            self.post_message(self.DeleteRequested(item.chat_id))


class ClickableMessage(Vertical):
    """A chat message container that copies content when clicked."""

    def __init__(self, content: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._content = content

    def on_click(self, event: Click) -> None:
        """Copy message content to clipboard when clicked."""
        event.stop()
        try:
            import pyperclip
            pyperclip.copy(self._content)
            self.app.notify("Copied to clipboard", timeout=2)
        except Exception:
            self.app.copy_to_clipboard(self._content)
            self.app.notify("Copied (terminal)", timeout=2)


class ChatHistoryWidget(VerticalScroll):
    """Scrollable message log of the active chat."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._chat_id: str | None = None
        self._rendered = 0

    def show_chat(self, chat: Chat | None) -> None:
        """Display ``chat``, mounting only turns not yet on screen."""
        chat_id = chat.id if chat else None
        messages = chat.messages if chat else []
        if chat_id != self._chat_id or len(messages) < self._rendered:
            self.remove_children()
            self._chat_id = chat_id
            self._rendered = 0

        for message in messages[self._rendered:]:
            self._render_message(message)
        self._rendered = len(messages)

        self.border_title = chat.title if chat else "Chat"
        self.border_subtitle = f"{len(messages)} messages" if chat else "No chat selected"
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Text of the last assistant turn on screen."""
        for child in reversed(list(self.query(ClickableMessage))):
            if child.has_class("assistant-message"):
                return child._content
        return None

    def _render_message(self, msg: Message) -> None:
        """Render a single message to the display."""
        if msg.role == "user":
            prefix = "You"
            border_class = "user-message"
            icon = ">"
        else:
            prefix = "Assistant"
            border_class = "assistant-message"
            icon = "<"
            if msg.content.startswith("Error: "):
                border_class += " error-message"

        container = ClickableMessage(content=msg.content, classes=f"chat-message {border_class}")
        container.compose_add_child(Static(f"{icon} {prefix}", classes="message-header"))
        if msg.role == "assistant":
            container.compose_add_child(Markdown(msg.content, classes="message-content"))
        else:
            container.compose_add_child(Static(msg.content, classes="message-content", markup=False))
        self.mount(container)


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        yield text_area
        yield Button("Send", id="send-btn", variant="success").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_key(self, event) -> None:
        """Handle the submit shortcut.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()

    def _submit(self) -> None:
        value = self.value.strip()
        if value:
            self.post_message(self.Submitted(value))

    @property
    def value(self) -> str:
        return self.query_one("#chat-input", TextArea).text

    def set_value(self, text: str) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.text = text
        text_area.move_cursor(text_area.document.end)

    def append_text(self, text: str) -> None:
        """Append a transcript to the buffer, space-separated."""
        text_area = self.query_one("#chat-input", TextArea)
        text_area.text = f"{text_area.text} {text}".strip()
        text_area.move_cursor(text_area.document.end)

    def set_busy(self, busy: bool) -> None:
        """Disable the Send button while a request is in flight."""
        self.query_one("#send-btn", Button).disabled = busy

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class StatusBar(Static):
    """One-line status: request phase, model and toggles."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._status = Status.ready()
        self._model = ""
        self._flags: list[str] = []

    def set_status(self, status: Status) -> None:
        self._status = status
        self.set_class(status.state == "loading", "-loading")
        self.set_class(status.state == "error", "-error")
        self._update_display()

    def set_model(self, model: str, flags: list[str]) -> None:
        self._model = model
        self._flags = flags
        self._update_display()

    def _update_display(self) -> None:
        markers = {"ready": "●", "loading": "◌", "error": "✕"}
        parts = [f"{markers[self._status.state]} {self._status.text}"]
        if self._model:
            parts.append(self._model)
        parts.extend(self._flags)
        self.update("  │  ".join(parts))


class DebugPanel(RichLog):
    """Log panel for real-time tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    _level_colors = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    _component_colors = {
        "TUI": "cyan",
        "Session": "green",
        "Request": "magenta",
        "Store": "bright_green",
        "Voice": "bright_blue",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (TUI, Session, Request, Store, Voice)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_color = self._level_colors.get(level, "white")
        comp_color = self._component_colors.get(component, "white")

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}][{component}][/] {message}"
        )

    def debug(self, component: str, message: str) -> None:
        self.log_entry(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.log_entry(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.log_entry(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.log_entry(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self._update_subtitle()

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
