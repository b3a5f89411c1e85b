"""Modal screens for the TUI.

This module hides the design decisions about:
- How preferences are edited before they are saved
- How the keyboard shortcut reference is presented
- Keyboard shortcuts for dialogs

Edits made in the settings screen reach the session only through the
Preferences value the screen is dismissed with.
"""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select, Static, Switch

from ..chat.models import Preferences
from ..config import AVAILABLE_MODELS

SHORTCUTS: list[tuple[str, str]] = [
    ("Ctrl+J", "Send message"),
    ("Ctrl+N", "New chat"),
    ("Ctrl+L", "Clear current chat"),
    ("Ctrl+, / F2", "Open settings"),
    ("Ctrl+B", "Toggle sidebar"),
    ("Ctrl+K", "Focus input"),
    ("Ctrl+Shift+V / F5", "Voice input"),
    ("Ctrl+T", "Speak replies on/off"),
    ("Ctrl+D", "Toggle log panel"),
    ("Ctrl+R", "Copy last response"),
    ("Delete", "Delete highlighted chat"),
    ("?", "Show shortcuts"),
    ("Esc", "Close dialog"),
]


class SettingsScreen(ModalScreen[Preferences | None]):
    """Preferences dialog. Dismisses with new Preferences on Save, None on Cancel."""

    CSS = """
    SettingsScreen {
        align: center middle;
        background: $background 70%;
    }

    #settings-dialog {
        width: 70;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #settings-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
    }

    .settings-label {
        margin-top: 1;
        color: $text-muted;
    }

    .settings-switch-row {
        height: auto;
        margin-top: 1;
    }

    .settings-switch-row Label {
        padding: 1 1;
    }

    #settings-buttons {
        width: 100%;
        height: 3;
        align: center middle;
        margin-top: 1;
    }

    #settings-buttons Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, preferences: Preferences) -> None:
        super().__init__()
        self._preferences = preferences

    def compose(self) -> ComposeResult:
        options = [(name, identifier) for identifier, name in AVAILABLE_MODELS]
        if self._preferences.model not in {identifier for identifier, _ in AVAILABLE_MODELS}:
            options.insert(0, (self._preferences.model, self._preferences.model))

        with Vertical(id="settings-dialog"):
            yield Static("Settings", id="settings-title")
            yield Label("OpenRouter API key", classes="settings-label")
            yield Input(
                value=self._preferences.api_key,
                placeholder="sk-or-v1-...",
                password=True,
                id="api-key",
            )
            yield Label("Model", classes="settings-label")
            yield Select(options, value=self._preferences.model, allow_blank=False, id="model")
            with Horizontal(classes="settings-switch-row"):
                yield Switch(value=self._preferences.context_enabled, id="context-enabled")
                yield Label("Send full conversation as context")
            with Horizontal(classes="settings-switch-row"):
                yield Switch(value=self._preferences.persistence_enabled, id="persistence-enabled")
                yield Label("Keep chat history between sessions")
            with Horizontal(id="settings-buttons"):
                yield Button("Save", id="btn-save", variant="success")
                yield Button("Cancel", id="btn-cancel", variant="error")

    def collect(self) -> Preferences:
        """Build Preferences from the current form values."""
        model = self.query_one("#model", Select).value
        return Preferences(
            api_key=self.query_one("#api-key", Input).value.strip(),
            model=model if isinstance(model, str) else self._preferences.model,
            context_enabled=self.query_one("#context-enabled", Switch).value,
            persistence_enabled=self.query_one("#persistence-enabled", Switch).value,
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-save":
            self.dismiss(self.collect())
        elif event.button.id == "btn-cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ShortcutsScreen(ModalScreen[None]):
    """Reference card of keyboard shortcuts."""

    CSS = """
    ShortcutsScreen {
        align: center middle;
        background: $background 70%;
    }

    #shortcuts-dialog {
        width: 56;
        height: auto;
        border: tall $accent;
        background: $surface;
        padding: 1 2;
    }

    #shortcuts-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
        padding: 0 0 1 0;
    }

    .shortcut-row {
        height: 1;
    }

    .shortcut-key {
        width: 22;
        color: $primary;
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=False),
        Binding("question_mark", "close", "Close", show=False),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="shortcuts-dialog"):
            yield Static("Keyboard Shortcuts", id="shortcuts-title")
            for keys, description in SHORTCUTS:
                with Horizontal(classes="shortcut-row"):
                    yield Static(keys, classes="shortcut-key")
                    yield Static(description)

    def action_close(self) -> None:
        self.dismiss(None)
