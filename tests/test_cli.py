"""Tests for the command-line interface."""
import pytest
from typer.testing import CliRunner

from prochat.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the commands."""
    for name in ("OPENROUTER_API_KEY", "PROCHAT_MODEL", "PROCHAT_DB_PATH", "PROCHAT_STORE"):
        monkeypatch.delenv(name, raising=False)


class TestCommands:
    """Tests for the non-interactive commands."""

    def test_models_lists_default_model(self):
        """Test that the model list includes the default."""
        result = runner.invoke(app, ["models"])

        assert result.exit_code == 0
        assert "x-ai/grok-4" in result.output

    def test_config_saves_and_masks_key(self):
        """Test that saved preferences are shown without the full key."""
        result = runner.invoke(
            app,
            ["config", "--store", "memory", "--api-key", "sk-or-v1-secretvalue1234", "--no-context"],
        )

        assert result.exit_code == 0
        assert "Settings saved!" in result.output
        assert "secretvalue" not in result.output
        assert "latest message only" in result.output

    def test_config_persists_in_sqlite(self, tmp_path):
        """Test that preferences survive between invocations."""
        db = str(tmp_path / "store.db")

        runner.invoke(app, ["config", "--store", "sqlite", "--db", db, "--model", "openai/gpt-4o"])
        result = runner.invoke(app, ["config", "--store", "sqlite", "--db", db])

        assert result.exit_code == 0
        assert "openai/gpt-4o" in result.output

    def test_chats_when_empty(self, tmp_path):
        """Test the message shown when nothing is stored."""
        result = runner.invoke(app, ["chats", "--store", "sqlite", "--db", str(tmp_path / "s.db")])

        assert result.exit_code == 0
        assert "No stored chats." in result.output

    def test_show_unknown_chat_fails(self, tmp_path):
        """Test that an unknown id exits with an error."""
        result = runner.invoke(
            app, ["show", "abc", "--store", "sqlite", "--db", str(tmp_path / "s.db")]
        )

        assert result.exit_code == 1
        assert "No chat matches" in result.output
