"""CLI entry point for chat-resume."""

import json
import logging
import os
from pathlib import Path

import click
import uvicorn

from .config import DEFAULT_HISTORY_LIMIT, get_history_path
from .export import history_to_json, history_to_markdown
from .history import HistoryStore
from .paths import resolve_working_directory


@click.group()
@click.option(
    "--history-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="History file to use instead of the default location.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity.",
)
@click.pass_context
def main(ctx: click.Context, history_file: Path | None, log_level: str):
    """Inspect and manage resumable chat sessions."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = history_file if history_file is not None else get_history_path()


def _open_store(ctx: click.Context) -> HistoryStore:
    return HistoryStore.from_path(ctx.obj)


@main.command()
@click.pass_context
def chats(ctx: click.Context):
    """List chats that have session history."""
    active = _open_store(ctx).get_all_active_sessions()
    if not active:
        click.echo("No session history.")
        return

    for chat_id, entry in sorted(active.items()):
        click.echo(f"{chat_id}\t{entry.project_name}\t{entry.conversation_id}")


@main.command()
@click.argument("chat_id", type=int)
@click.option("--limit", default=DEFAULT_HISTORY_LIMIT, show_default=True, help="Number of sessions to show.")
@click.option("--format", "fmt", type=click.Choice(["text", "md", "json"]), default="text", show_default=True)
@click.pass_context
def history(ctx: click.Context, chat_id: int, limit: int, fmt: str):
    """Show the most recent sessions of a chat."""
    entries = _open_store(ctx).get_history(chat_id, limit)

    if fmt == "json":
        click.echo(history_to_json(chat_id, entries))
    elif fmt == "md":
        click.echo(history_to_markdown(chat_id, entries))
    elif not entries:
        click.echo(f"No sessions for chat {chat_id}.")
    else:
        for entry in entries:
            preview = f"  {entry.last_message_preview}" if entry.last_message_preview else ""
            click.echo(f"{entry.last_activity}  {entry.conversation_id}  {entry.project_path}{preview}")


@main.command()
@click.argument("chat_id", type=int)
@click.argument("conversation_id")
@click.pass_context
def show(ctx: click.Context, chat_id: int, conversation_id: str):
    """Print one history entry as JSON."""
    entry = _open_store(ctx).get_session_by_conversation_id(chat_id, conversation_id)
    if entry is None:
        click.echo(f"Error: no session {conversation_id} in chat {chat_id}", err=True)
        ctx.exit(1)
    click.echo(json.dumps(entry.to_dict(), indent=2, ensure_ascii=False))


@main.command()
@click.argument("chat_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def clear(ctx: click.Context, chat_id: int, yes: bool):
    """Delete all session history of a chat.

    Do not run this while the owning bot process is using the same file;
    its next save would write the cleared history back.
    """
    store = _open_store(ctx)
    if store.get_last_session(chat_id) is None:
        click.echo(f"No sessions for chat {chat_id}.")
        return

    if not yes:
        click.confirm(f"Delete session history for chat {chat_id}?", abort=True)

    store.clear_history(chat_id)
    click.echo(f"Cleared session history for chat {chat_id}.")


@main.command()
@click.argument("path")
def resolve(path: str):
    """Show where a stored working directory resolves on this machine."""
    click.echo(resolve_working_directory(os.path.expanduser(path)))


@main.command()
@click.option("--port", default=8080, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.pass_context
def serve(ctx: click.Context, port: int, host: str):
    """Start the read-only inspection API."""
    os.environ["CHAT_RESUME_HISTORY_FILE"] = str(ctx.obj)
    click.echo(f"Starting chat-resume on http://{host}:{port}")
    uvicorn.run("chat_resume.server:app", host=host, port=port, reload=False)
