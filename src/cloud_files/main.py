"""Main entry point for the cloud-files CLI.

Provides a Typer-based CLI for working with objects in a Rackspace Cloud
Files container.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from cloud_files import __version__
from cloud_files.commands import objects as object_commands
from cloud_files.logging_config import setup_logging

console = Console()

# Create the main Typer app
app = typer.Typer(
    name="cloud-files",
    help="Rackspace Cloud Files client",
    rich_markup_mode="rich",
)

# Add subcommand groups
app.add_typer(object_commands.app, name="object", help="Object operations")
app.command()(object_commands.status)


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"cloud-files version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    log_dir: Optional[Path] = typer.Option(
        None,
        "--log-dir",
        help="Write a debug log to this directory",
    ),
) -> None:
    """cloud-files: upload, fetch and delete objects in a Cloud Files container.

    ## Commands

    * [bold cyan]config[/bold cyan] - Show or change configuration
    * [bold cyan]status[/bold cyan] - Authenticate and show endpoints
    * [bold cyan]object[/bold cyan] - Object operations (upload, put, cat, rm, url)

    ## Getting Started

    1. Configure the account and container:
       [dim]$ cloud-files config set account.username myuser[/dim]
       [dim]$ cloud-files config set container.name assets[/dim]

    2. Export the API key:
       [dim]$ export CLOUDFILES_API_KEY=...[/dim]

    3. Check the connection:
       [dim]$ cloud-files status[/dim]
    """
    if log_dir is not None:
        setup_logging(log_dir, level=logging.DEBUG)


@app.command()
def config(
    action: str = typer.Argument(
        ...,
        help="Action to perform (show, set, path)",
    ),
    key: str = typer.Argument(
        None,
        help="Configuration key (for set action)",
    ),
    value: str = typer.Argument(
        None,
        help="Configuration value (for set action)",
    ),
) -> None:
    """Manage configuration.

    Show, set, or display the path to the configuration file.

    Examples:
        cloud-files config show          # Show all configuration
        cloud-files config set container.name assets
        cloud-files config path          # Show config file path
    """
    from cloud_files.config import ensure_config_exists, get_config_path, get_env_var_name, get_secret

    if action == "show":
        try:
            cfg = ensure_config_exists()
        except (OSError, ValueError) as e:
            console.print(f"[red]Error loading config: {e}[/red]")
            raise typer.Exit(1)

        api_key_state = "set" if get_secret("api_key") else "(not set)"
        table = Panel.fit(
            f"[cyan]Username:[/cyan] {cfg.username or '(not set)'}\n"
            f"[cyan]Region:[/cyan] {cfg.region}\n"
            f"[cyan]Identity:[/cyan] {cfg.identity}\n"
            f"[cyan]Container:[/cyan] {cfg.container or '(not set)'}\n"
            f"[cyan]Timeout:[/cyan] {cfg.timeout}s\n"
            f"[cyan]{get_env_var_name('api_key')}:[/cyan] {api_key_state}",
            title="Configuration",
            border_style="green",
        )
        console.print(table)

    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage: cloud-files config set <key> <value>[/red]")
            raise typer.Exit(1)

        try:
            cfg = ensure_config_exists()
            cfg.set(key, value)
            cfg.save()
            console.print(f"[green]Set {key} = {value}[/green]")
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    elif action == "path":
        console.print(get_config_path())

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Valid actions: show, set, path")
        raise typer.Exit(1)


# Entry point for the CLI
def cli_entry() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli_entry()
