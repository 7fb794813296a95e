"""wabot CLI - Main commands."""
import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from wabot.core.exceptions import ConfigurationError, SocketError, WabotException
from wabot.core.logging import configure_logging
from wabot.core.settings import Settings
from wabot.core.storage import DEFAULT_STORAGE_HOST

app = typer.Typer(
    name="wabot",
    help="WhatsApp automation bot bootstrapper",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def load_settings(env_file: Optional[Path], session_dir: Optional[Path] = None) -> Settings:
    try:
        settings = Settings.from_env(dotenv_path=str(env_file) if env_file else None)
    except ConfigurationError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)
    if session_dir is not None:
        settings.session_dir = session_dir
    configure_logging(settings.log_level)
    return settings


@app.command()
def run(
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file to load"),
):
    """Bootstrap the session, connect the socket and serve HTTP."""
    from wabot.app import run as run_bot
    
    settings = load_settings(env_file)
    try:
        reason = run_async(run_bot(settings))
    except (ConfigurationError, SocketError) as e:
        console.print(f"[red]Critical error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[yellow]Bot stopped: {reason}[/yellow]")


@app.command("fetch-session")
def fetch_session(
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file to load"),
    session_dir: Optional[Path] = typer.Option(None, "--session-dir", "-d", help="Override SESSION_DIR"),
    force: bool = typer.Option(False, "--force", "-f", help="Download even if creds.json exists"),
):
    """Download creds.json from the SESSION_ID token without connecting."""
    from wabot.bootstrap import SessionBootstrapper
    
    settings = load_settings(env_file, session_dir)
    bootstrapper = SessionBootstrapper(settings)
    
    if force:
        try:
            bootstrapper.store.remove_creds()
        except WabotException as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    
    if run_async(bootstrapper.initialize()):
        console.print(f"[green]Session ready at {bootstrapper.store.creds_path}[/green]")
    else:
        console.print("[red]No session available, QR pairing will be required.[/red]")
        raise typer.Exit(1)


@app.command("parse-token")
def parse_token(
    token: str = typer.Argument(..., help="Session token to inspect"),
    marker: Optional[str] = typer.Option(None, "--marker", "-m", help="Token marker"),
    host: str = typer.Option(DEFAULT_STORAGE_HOST, "--host", help="Storage host"),
):
    """Show the file id and storage link encoded in a session token."""
    from wabot.core.session import SessionToken, DEFAULT_MARKER
    from wabot.core.storage import RemoteFile
    
    try:
        parsed = SessionToken.parse(token, marker or DEFAULT_MARKER)
    except WabotException as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    
    remote = RemoteFile.from_parts(parsed.file_id, parsed.decryption_key, host=host)
    table = Table(show_header=False)
    table.add_row("File ID", parsed.file_id)
    table.add_row("Key", parsed.decryption_key)
    table.add_row("URL", remote.url)
    console.print(table)


@app.command("clear-session")
def clear_session(
    env_file: Optional[Path] = typer.Option(None, "--env-file", help=".env file to load"),
    session_dir: Optional[Path] = typer.Option(None, "--session-dir", "-d", help="Override SESSION_DIR"),
):
    """Delete the local session directory."""
    from wabot.core.session import FileCredentialStore
    
    settings = load_settings(env_file, session_dir)
    store = FileCredentialStore(settings.session_dir)
    if not store.session_dir.exists():
        console.print("[yellow]No active session[/yellow]")
        return
    try:
        store.delete()
    except WabotException as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted {store.session_dir}[/green]")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
