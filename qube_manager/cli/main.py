"""CLI for qube-manager.

Commands:
    run            Run the quorum daemon
    send-message   Build a signal event (upgrade or reboot) as NDJSON
    version        Show version information
"""

import asyncio
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from qube_manager.bootstrap.daemon import build_daemon
from qube_manager.bootstrap.logging import configure_logging
from qube_manager.cli.messages import MessageError, build_signal_event
from qube_manager.config.config_file import load_config
from qube_manager.config.quorum_config import DEFAULT_CONFIG_DIR
from qube_manager.domain.errors.configuration import ConfigurationError
from qube_manager.version import version_string
from qube_manager.workers.quorum_daemon import run_quorum_daemon


class LogEnvironment(str, Enum):
    """Log output format."""

    production = "production"
    development = "development"


app = typer.Typer(
    name="qube-manager",
    help="Quorum-coordinated upgrade and reboot daemon",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(version_string(), highlight=False)
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """qube-manager: act on network-wide upgrades once a quorum of signers agrees."""
    pass


@app.command()
def run(
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR,
        "--config-dir",
        "-c",
        help="Configuration directory (config.yaml, history, journal, outbox)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Select and log actions without executing, recording or acknowledging",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log at DEBUG level",
    ),
    environment: LogEnvironment = typer.Option(
        LogEnvironment.production,
        "--environment",
        "-e",
        help="Log format: production (JSON) or development (console)",
    ),
) -> None:
    """Run the quorum daemon until SIGINT or SIGTERM.

    Example:
        qube-manager run --config-dir ~/.qube-manager --dry-run
    """
    load_dotenv()
    configure_logging(environment.value, verbose=verbose)
    try:
        config = load_config(config_dir).with_environment()
        daemon = build_daemon(config, dry_run=dry_run)
    except (ConfigurationError, ValueError) as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    asyncio.run(run_quorum_daemon(daemon))


@app.command("send-message")
def send_message(
    action: str = typer.Option(
        ...,
        "--type",
        "-t",
        help="Action type: 'upgrade' or 'reboot'",
    ),
    version: str = typer.Option(
        ...,
        "--version",
        help="Semantic version (e.g. v1.2.3)",
    ),
    binary_hash: str = typer.Option(
        "",
        "--hash",
        help="SHA256 hash of the binary (required)",
    ),
    network: str = typer.Option(
        "",
        "--network",
        "-n",
        help="Network identifier (e.g. 'hqz', 'testnet')",
    ),
    genesis: Optional[str] = typer.Option(
        None,
        "--genesis",
        help="Genesis URL (required for 'reboot')",
    ),
    required_by: Optional[str] = typer.Option(
        None,
        "--required-by",
        help="Unix timestamp deadline (optional for 'reboot')",
    ),
    signer: Optional[str] = typer.Option(
        None,
        "--signer",
        "-s",
        help="Signer identity (default: node_id from the config directory)",
    ),
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_DIR,
        "--config-dir",
        "-c",
        help="Configuration directory used to resolve the default signer",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Append the event to this NDJSON file instead of printing it",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show the prepared event without writing it",
    ),
) -> None:
    """Build a signal event (kind 33321) for an upgrade or reboot.

    Example:
        qube-manager send-message --type upgrade --version v1.5.0 \\
            --hash 3f2a... --network hqz --output ~/.qube-manager/events.jsonl
    """
    configure_logging(LogEnvironment.development.value)
    if signer is None:
        try:
            signer = load_config(config_dir).node_id
        except ConfigurationError as exc:
            err_console.print(f"[red]Configuration error:[/red] {exc}")
            raise typer.Exit(code=1) from exc

    try:
        event = build_signal_event(
            signer=signer,
            action=action,
            version=version,
            binary_hash=binary_hash,
            network=network,
            genesis=genesis,
            required_by=required_by,
        )
    except MessageError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    line = event.model_dump_json(exclude_none=True)

    if dry_run:
        table = Table(title="Prepared signal event (kind 33321)")
        table.add_column("Tag")
        table.add_column("Value")
        for tag in event.tags:
            table.add_row(tag[0], " ".join(tag[1:]))
        console.print(table)
        console.print(f"Content: {event.content}", highlight=False)
        return

    if output is None:
        typer.echo(line)
        return

    try:
        with output.expanduser().open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] cannot write {output}: {exc}")
        raise typer.Exit(code=1) from exc
    err_console.print(
        f"[green]Signal written[/green] to {output} ({action} {version})",
        highlight=False,
    )


@app.command("version")
def show_version() -> None:
    """Show version information."""
    console.print(version_string(), highlight=False)


if __name__ == "__main__":
    app()
