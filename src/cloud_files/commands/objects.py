"""Object commands for cloud-files.

Provides CLI commands for uploading, reading, deleting and locating objects
in the configured container.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from cloud_files.config import ClientConfig, get_config_path, get_secret
from cloud_files.logging_config import get_logger
from cloud_files.services.storage import StorageClient, connect
from cloud_files.services.transport import Transport

console = Console()
logger = get_logger(__name__)
app = typer.Typer(help="Object operations")


def _load_config(config_path: Optional[Path]) -> ClientConfig:
    """Load and validate config, exiting with code 1 on problems."""
    try:
        if config_path is None:
            config_path = get_config_path()
        config = ClientConfig.load(config_path)
    except FileNotFoundError:
        console.print("[red]Config file not found. Run 'cloud-files config show' to create one.[/red]")
        raise typer.Exit(1)

    problems = config.validate()
    if problems:
        for problem in problems:
            console.print(f"[red]Config error: {problem}[/red]")
        raise typer.Exit(1)
    return config


def _open_client(config_path: Optional[Path]) -> StorageClient:
    """Connect with the configured account, exiting with code 1 on failure."""
    config = _load_config(config_path)
    result = connect(
        config.container,
        config.username,
        get_secret("api_key") or "",
        config.region,
        config.identity,
        transport=Transport(timeout=config.timeout),
        retry_delay=config.retry_delay,
    )
    if not result.authenticated:
        result.client.close()
        console.print(f"[red]Authentication failed: {result.error}[/red]")
        raise typer.Exit(1)
    return result.client


def status(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Authenticate and show the resolved endpoints and CDN URLs."""
    with _open_client(config_path) as client:
        session = client.session
        cdn = client.container_cdn_urls()
        console.print(
            Panel.fit(
                f"[cyan]Container:[/cyan] {session.container}\n"
                f"[cyan]Storage Endpoint:[/cyan] {session.storage_url or '(not found)'}\n"
                f"[cyan]CDN Endpoint:[/cyan] {session.cdn_url or '(not found)'}\n"
                f"[cyan]CDN HTTPS URL:[/cyan] {cdn.https_url or '(not CDN-enabled)'}\n"
                f"[cyan]CDN HTTP URL:[/cyan] {cdn.http_url or '(not CDN-enabled)'}",
                title="Cloud Files",
                border_style="green",
            )
        )


@app.command()
def upload(
    local_path: Path = typer.Argument(..., help="Local file to upload (deleted after upload)"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Object name (defaults to the file name)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Upload a local file and remove the local copy."""
    if not local_path.is_file():
        console.print(f"[red]File not found: {local_path}[/red]")
        raise typer.Exit(1)

    remote_name = name or local_path.name
    with _open_client(config_path) as client:
        if not client.upload_from_local_file(remote_name, local_path):
            console.print(f"[red]Upload of {remote_name} failed[/red]")
            raise typer.Exit(1)

    logger.info(f"Uploaded {local_path} as {remote_name}")
    console.print(f"[green]Uploaded {remote_name}[/green]")


@app.command()
def put(
    name: str = typer.Argument(..., help="Object name"),
    text: str = typer.Argument(..., help="Object contents"),
    cors: bool = typer.Option(False, "--cors", help="Attach CORS headers"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Upload a string as an object."""
    with _open_client(config_path) as client:
        if not client.upload_from_string(name, text, include_cors_headers=cors):
            console.print(f"[red]Upload of {name} failed[/red]")
            raise typer.Exit(1)

    console.print(f"[green]Uploaded {name}[/green]")


@app.command()
def cat(
    name: str = typer.Argument(..., help="Object name"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Print an object's contents."""
    with _open_client(config_path) as client:
        content = client.get_object_as_string(name)

    console.print(content, markup=False, highlight=False, soft_wrap=True, end="")


@app.command()
def rm(
    name: str = typer.Argument(..., help="Object name"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Delete an object."""
    with _open_client(config_path) as client:
        response = client.delete(name)

    if response is None:
        console.print(f"[red]Failed to delete {name}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted {name}[/green]")


@app.command()
def url(
    name: str = typer.Argument(..., help="Object name"),
    http: bool = typer.Option(False, "--http", help="Show the plain HTTP URL"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Print the CDN URL of an object."""
    with _open_client(config_path) as client:
        cdn_url = client.get_http_url(name) if http else client.get_https_url(name)

    if cdn_url is None:
        console.print("[yellow]Container is not CDN-enabled[/yellow]")
        raise typer.Exit(1)
    console.print(cdn_url, markup=False, highlight=False, soft_wrap=True)
