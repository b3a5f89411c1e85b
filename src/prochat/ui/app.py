"""Main Textual TUI application.

Orchestrates the UI components and routes user actions to a ChatSession.
All chat state lives in the session; widgets only mirror it.
"""

import asyncio
import contextlib

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, TextArea

from ..chat.controller import SendResult
from ..chat.manager import ChatSessionManager
from ..chat.models import Preferences, Status
from ..config import STATUS_LISTENING_TEXT, STATUS_SETTINGS_SAVED_TEXT, LogLevel
from ..session import ChatSession
from .screens import SettingsScreen, ShortcutsScreen
from .styles import APP_CSS
from .widgets import ChatHistoryWidget, ChatInputBar, ChatListPanel, DebugPanel, StatusBar


class ProChatApp(App):
    """Textual TUI for multi-chat conversations."""

    CSS = APP_CSS
    TITLE = "Pro-Chat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+n", "new_chat", "New Chat"),
        Binding("ctrl+l", "clear_chat", "Clear Chat"),
        Binding("ctrl+comma", "open_settings", "Settings", show=False),
        Binding("f2", "open_settings", "Settings"),
        Binding("ctrl+b", "toggle_sidebar", "Sidebar"),
        Binding("ctrl+k", "focus_input", "Focus Input", show=False),
        Binding("ctrl+shift+v", "toggle_voice", "Voice", show=False),
        Binding("f5", "toggle_voice", "Voice"),
        Binding("ctrl+t", "toggle_speak_replies", "Speak Replies", show=False),
        Binding("ctrl+d", "toggle_debug", "Log"),
        Binding("ctrl+r", "copy_last_response", "Copy Response", show=False),
        Binding("question_mark", "show_shortcuts", "Shortcuts"),
    ]

    def __init__(self, session: ChatSession, log_level: str | None = None) -> None:
        super().__init__()
        self._session = session
        self._log_level = log_level
        self._refresh_pending = False
        self._listening = False
        self._synced_input = ""

    @property
    def session(self) -> ChatSession:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatListPanel(id="chat-list")
        with Vertical(id="main-column"):
            yield ChatHistoryWidget(id="chat-history")
            yield DebugPanel(id="debug-panel")
            yield StatusBar(id="status-bar")
            yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.theme = "catppuccin-mocha"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        self._session.set_debug_callback(self._route_debug)
        self._session.manager.on_change(self._on_chats_changed)
        self._session.controller.on_status(self._on_status)
        self._session.controller.on_credentials_required(self._on_credentials_required)

        self._update_subtitle()
        self._on_status(self._session.status)
        self._schedule_refresh()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_unmount(self) -> None:
        """Detach from the session; it outlives the app."""
        self._session.manager.remove_listener(self._on_chats_changed)
        self._session.set_debug_callback(None)
        self._session.voice.stop()

    # ---- session -> widgets --------------------------------------------

    def _route_debug(self, level: str, component: str, message: str) -> None:
        """Route debug messages to the log panel."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        log_panel.log_entry(component, message, LogLevel.from_string(level))

    def _on_chats_changed(self, manager: ChatSessionManager) -> None:
        self._schedule_refresh()

    def _schedule_refresh(self) -> None:
        # Several mutations per send collapse into one repaint
        if not self._refresh_pending:
            self._refresh_pending = True
            self.call_after_refresh(self._refresh_chats)

    async def _refresh_chats(self) -> None:
        self._refresh_pending = False
        manager = self._session.manager
        chats = manager.chats
        await self.query_one("#chat-list", ChatListPanel).set_chats(chats, manager.active_id)
        self.query_one("#chat-history", ChatHistoryWidget).show_chat(manager.active_chat)
        self._sync_input()

    def _sync_input(self) -> None:
        # Apply only buffer changes made by the session, never stale text
        pending = self._session.manager.pending_input
        if pending == self._synced_input:
            return
        self._synced_input = pending
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        if input_bar.value != pending:
            input_bar.set_value(pending)

    def _on_status(self, status: Status) -> None:
        self.query_one("#status-bar", StatusBar).set_status(status)
        self.query_one("#chat-input-bar", ChatInputBar).set_busy(
            self._session.controller.is_busy
        )

    def _on_credentials_required(self) -> None:
        self.action_open_settings()

    def _update_subtitle(self) -> None:
        prefs = self._session.preferences
        flags = [
            "context" if prefs.context_enabled else "no context",
            "saved" if prefs.persistence_enabled else "not saved",
        ]
        if self._session.controller.speak_replies:
            flags.append("voice replies")
        self.sub_title = f"{prefs.model} | {self._session.store.backend.backend_type}"
        self.query_one("#status-bar", StatusBar).set_model(prefs.model_short_name, flags)

    # ---- input ---------------------------------------------------------

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        controller = self._session.controller
        if controller.is_busy:
            self.notify("Wait for the current reply", severity="warning", timeout=2)
            return
        self._send(event.value)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        """Mirror the input bar into the session's pending input."""
        if event.text_area.id == "chat-input":
            self._synced_input = event.text_area.text
            self._session.manager.pending_input = event.text_area.text

    @work(group="send")
    async def _send(self, text: str) -> None:
        """Run one send as a background async worker."""
        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        input_bar.set_busy(True)
        try:
            result = await self._session.send(text)
        finally:
            input_bar.set_busy(False)
            input_bar.focus_input()
        if result is SendResult.FAILED:
            self.notify(self._session.status.text[:60], severity="error", timeout=5)

    def on_chat_list_panel_chat_selected(self, event: ChatListPanel.ChatSelected) -> None:
        self._session.manager.switch_to(event.chat_id)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def on_chat_list_panel_delete_requested(self, event: ChatListPanel.DeleteRequested) -> None:
        self._session.manager.delete_chat(event.chat_id)
        self.notify("Chat deleted", timeout=2)

    # ---- actions -------------------------------------------------------

    def action_new_chat(self) -> None:
        """Create a new chat and clear the input buffer."""
        self._session.new_chat()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def action_clear_chat(self) -> None:
        """Empty the active chat."""
        self._session.clear_chat()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def action_open_settings(self) -> None:
        """Open the settings dialog."""
        if isinstance(self.screen, SettingsScreen):
            return
        self.push_screen(SettingsScreen(self._session.preferences), self._apply_settings)

    async def _apply_settings(self, prefs: Preferences | None) -> None:
        if prefs is not None:
            await self._session.save_preferences(prefs)
            self._update_subtitle()
            self.set_timer(2, self._reset_saved_status)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _reset_saved_status(self) -> None:
        status = self._session.status
        if status.state == "ready" and status.text == STATUS_SETTINGS_SAVED_TEXT:
            self._session.controller.set_status(Status.ready())

    def action_show_shortcuts(self) -> None:
        """Show the keyboard shortcut reference."""
        if not isinstance(self.screen, ShortcutsScreen):
            self.push_screen(ShortcutsScreen())

    def action_toggle_sidebar(self) -> None:
        """Show or hide the chat list."""
        sidebar = self.query_one("#chat-list", ChatListPanel)
        sidebar.display = not sidebar.display

    def action_focus_input(self) -> None:
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_toggle_speak_replies(self) -> None:
        """Turn spoken replies on or off."""
        controller = self._session.controller
        if not controller.speak_replies and not self._session.voice.capabilities.can_speak:
            self.notify("Spoken replies are not available", severity="warning", timeout=3)
            return
        controller.speak_replies = not controller.speak_replies
        self._update_subtitle()

    def action_toggle_voice(self) -> None:
        """Start or stop listening for voice input."""
        voice = self._session.voice
        if self._listening:
            voice.stop()
            self._listening = False
            self._session.controller.set_status(Status.ready())
            return
        if not voice.capabilities.can_listen:
            self.notify("Voice input is not available", severity="warning", timeout=3)
            return
        self._listen()

    @work(exclusive=True, group="voice")
    async def _listen(self) -> None:
        """Capture one utterance into the input buffer."""
        controller = self._session.controller
        self._listening = True
        controller.set_status(Status.loading(STATUS_LISTENING_TEXT))
        try:
            transcript = await self._session.voice.listen()
        except Exception as e:
            self._route_debug("error", "Voice", f"Recognition failed: {e}")
            controller.set_status(Status.error("Voice recognition error"))
            return
        finally:
            self._listening = False
        if transcript:
            self.query_one("#chat-input-bar", ChatInputBar).append_text(transcript)
        controller.set_status(Status.ready())

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_textual_tui(session: ChatSession, log_level: str | None = None) -> None:
    """Run the Textual TUI.

    Args:
        session: Loaded chat session; the caller closes it afterwards
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = ProChatApp(session, log_level=log_level)
    with contextlib.suppress(KeyboardInterrupt, asyncio.CancelledError):
        await app.run_async()
