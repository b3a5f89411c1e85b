"""Main CLI application using Typer."""
import asyncio
from datetime import datetime
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import AVAILABLE_MODELS
from ..session import ChatSession
from .providers import get_voice, open_session

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="prochat",
    help="Multi-chat terminal client for OpenRouter chat completions",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

StoreOption = typer.Option(
    None,
    "--store",
    help="Store backend: 'sqlite' (persistent) or 'memory' (session-only)"
)
DbOption = typer.Option(
    None,
    "--db",
    help="Path for the SQLite store (only with --store sqlite)"
)


def _format_ms(value: int) -> str:
    return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M")


def _mask(secret: str) -> str:
    if not secret:
        return "[dim]not set[/dim]"
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:6]}...{secret[-4:]}"


@app.command(name="chat")
def chat_command(
    store: str | None = StoreOption,
    db: Path | None = DbOption,
    voice: str = typer.Option(
        "none",
        "--voice",
        "-v",
        help="Voice backend: 'none' or 'speech_recognition'"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive terminal chat client."""
    async def _chat():
        from ..ui import run_textual_tui

        session = await open_session(store, db, voice=get_voice(voice, console))
        try:
            await run_textual_tui(session, log_level=log_level)
        finally:
            await session.close()
            console.print("\n[dim]Goodbye![/dim]")

    try:
        asyncio.run(_chat())
    except KeyboardInterrupt:
        pass


@app.command(name="chats")
def list_chats(
    store: str | None = StoreOption,
    db: Path | None = DbOption,
):
    """List stored chats, most recent first."""
    async def _list():
        session = await open_session(store, db)
        try:
            chats = session.manager.chats
            if not chats:
                console.print("[dim]No stored chats.[/dim]")
                if not session.preferences.persistence_enabled:
                    console.print("[dim]Persistence is off; enable it with: prochat config --persist[/dim]")
                return

            table = Table(title="Chats")
            table.add_column("ID", style="dim")
            table.add_column("Title", style="cyan")
            table.add_column("Messages", justify="right")
            table.add_column("Updated", style="green")
            for chat in chats:
                table.add_row(
                    chat.id[:8],
                    chat.title,
                    str(len(chat.messages)),
                    _format_ms(chat.updated_at),
                )
            console.print(table)
        finally:
            await session.close()

    asyncio.run(_list())


@app.command()
def show(
    chat_id: str = typer.Argument(..., help="Chat ID (or a unique prefix of it)"),
    store: str | None = StoreOption,
    db: Path | None = DbOption,
):
    """Print the messages of a stored chat."""
    async def _show():
        session = await open_session(store, db)
        try:
            matches = [c for c in session.manager.chats if c.id.startswith(chat_id)]
            if len(matches) != 1:
                reason = "No chat matches" if not matches else "Ambiguous chat ID"
                console.print(f"[red]Error: {reason}: {chat_id}[/red]")
                raise typer.Exit(code=1)

            chat = matches[0]
            console.print(f"[bold cyan]{chat.title}[/bold cyan] [dim]({chat.id})[/dim]\n")
            for message in chat.messages:
                style = "yellow" if message.role == "user" else "green"
                label = "You" if message.role == "user" else "Assistant"
                console.print(Panel(message.content, title=label, border_style=style, title_align="left"))
        finally:
            await session.close()

    asyncio.run(_show())


@app.command()
def forget(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation"
    ),
    store: str | None = StoreOption,
    db: Path | None = DbOption,
):
    """Delete the stored chat history."""
    async def _forget():
        session = await open_session(store, db)
        try:
            if not await session.store.has_chats():
                console.print("[dim]No stored chat history.[/dim]")
                return
            if not yes and not typer.confirm("Delete all stored chats?"):
                console.print("[dim]Aborted.[/dim]")
                return
            await session.store.clear_chats()
            console.print("[green]Stored chat history deleted.[/green]")
        finally:
            await session.close()

    asyncio.run(_forget())


@app.command()
def config(
    api_key: str | None = typer.Option(None, "--api-key", help="OpenRouter API key"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    context: bool | None = typer.Option(
        None,
        "--context/--no-context",
        help="Send the full chat history (or only the latest message)"
    ),
    persist: bool | None = typer.Option(
        None,
        "--persist/--no-persist",
        help="Keep chat history between sessions"
    ),
    store: str | None = StoreOption,
    db: Path | None = DbOption,
):
    """Show preferences, or save the ones given as options."""
    async def _config():
        session = await open_session(store, db)
        try:
            updates = {
                key: value
                for key, value in {
                    "api_key": api_key,
                    "model": model,
                    "context_enabled": context,
                    "persistence_enabled": persist,
                }.items()
                if value is not None
            }
            if updates:
                await session.save_preferences(session.preferences.model_copy(update=updates))
                console.print("[green]Settings saved![/green]")
            _print_preferences(session)
        finally:
            await session.close()

    asyncio.run(_config())


def _print_preferences(session: ChatSession) -> None:
    prefs = session.preferences
    table = Table(title="Preferences", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("API key", _mask(prefs.api_key))
    table.add_row("Model", prefs.model)
    table.add_row("Context", "full history" if prefs.context_enabled else "latest message only")
    table.add_row("Persistence", "on" if prefs.persistence_enabled else "off")
    table.add_row("Store", session.store.backend.backend_type)
    console.print(table)


@app.command()
def models():
    """List known model identifiers."""
    table = Table(title="Models")
    table.add_column("Identifier", style="cyan")
    table.add_column("Name")
    for identifier, name in AVAILABLE_MODELS:
        table.add_row(identifier, name)
    console.print(table)
    console.print("[dim]Any OpenRouter model identifier is accepted.[/dim]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
