"""Terminal UI module for prochat.

Provides a Textual-based TUI driving a ChatSession.

Module structure (Parnas principle - each module hides a design decision):
- widgets.py: Custom widgets (chat list, message log, input bar, status, log)
- styles.py: CSS styling (layout decisions)
- screens.py: Modal dialogs (settings, shortcut reference)
- app.py: Application orchestration (user interaction flow)
"""

from .app import ProChatApp, run_textual_tui
from .screens import SettingsScreen, ShortcutsScreen
from .widgets import ChatHistoryWidget, ChatInputBar, ChatListPanel, DebugPanel, StatusBar

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "ChatListPanel",
    "DebugPanel",
    "ProChatApp",
    "SettingsScreen",
    "ShortcutsScreen",
    "StatusBar",
    "run_textual_tui",
]
