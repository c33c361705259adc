"""Command-line interface for commit-counter."""

import asyncio
import json
import logging
import os

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Confirm, Prompt
from rich.table import Table

from commit_counter.api_client import APIClient
from commit_counter.config import Config
from commit_counter.counter import CommitCounter
from commit_counter.errors import UnknownPlatformError
from commit_counter.models import CountResult
from commit_counter.platforms import PLATFORMS, get_platform
from commit_counter.settings import Settings, resolve_settings

app = typer.Typer(
    name="commit-counter",
    help="Count a user's commits and active projects across a code-hosting platform",
    no_args_is_help=True,
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_token(platform: str, token: str | None, config: Config) -> str | None:
    """Pick the token from the option, then ``<PLATFORM>_TOKEN``, then storage."""
    return token or os.environ.get(f"{platform.upper()}_TOKEN") or config.get_token(platform)


def _print_result(platform: str, settings: Settings, result: CountResult) -> None:
    table = Table(
        title=f"{platform} activity for {settings.username or 'authenticated user'}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="green", justify="right")

    table.add_row("Projects", str(result.projects))
    table.add_row("Commits", str(result.commits))
    if settings.from_date or settings.until_date:
        table.add_row(
            "Period", f"{settings.from_date or '...'} to {settings.until_date or 'now'}"
        )
    table.add_row("Minimum commits per project", str(settings.min_commits))

    console.print(table)


async def _run_count(
    platform: str, settings: Settings, base_url: str | None, timeout: float
) -> CountResult:
    """Build the client, strategy and counter, then count."""
    async with asyncio.timeout(timeout):
        async with APIClient(
            username=settings.username,
            access_token=settings.access_token,
            timeout=settings.request_timeout,
        ) as client:
            strategy = get_platform(platform, client, settings, base_url=base_url)
            return await CommitCounter(settings, strategy, client).get()


@app.command()
def version() -> None:
    """Show the version and exit."""
    from commit_counter import __version__

    print(f"commit-counter {__version__}")


@app.command()
def count(
    platform: str = typer.Argument(
        ..., help=f"Platform to count on ({', '.join(sorted(PLATFORMS))})"
    ),
    username: str | None = typer.Option(
        None, "--username", "-u", help="Account username (defaults to the stored one)"
    ),
    token: str | None = typer.Option(
        None,
        "--token",
        "-t",
        help="Access token (or set <PLATFORM>_TOKEN, e.g. GITHUB_TOKEN)",
    ),
    emails: list[str] | None = typer.Option(
        None, "--email", "-e", help="Commit e-mail address of the user (repeatable)"
    ),
    names: list[str] | None = typer.Option(
        None, "--name", "-n", help="Commit author name of the user (repeatable)"
    ),
    from_date: str = typer.Option("", "--from-date", help="Start date (ISO-8601)"),
    until_date: str = typer.Option("", "--until-date", help="End date (ISO-8601)"),
    min_commits: int = typer.Option(
        1, "--min-commits", help="Commits a repo needs to count as a project"
    ),
    max_concurrency: int = typer.Option(
        1, "--max-concurrency", help="Repos counted at the same time"
    ),
    base_url: str | None = typer.Option(
        None, "--base-url", help="API base URL for self-hosted installs"
    ),
    timeout: float = typer.Option(
        600.0, "--timeout", help="Give up after this many seconds"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Count commits and active projects for a user."""
    _configure_logging(verbose)

    platform = platform.lower()
    if platform not in PLATFORMS:
        print(
            f"[red]Error: Unknown platform '{platform}'. "
            f"Choose from: {', '.join(sorted(PLATFORMS))}[/red]"
        )
        raise typer.Exit(1)

    config = Config()
    access_token = _resolve_token(platform, token, config)
    if not access_token:
        print(
            f"[red]Error: No {platform} token found.[/red] Use --token, set "
            f"{platform.upper()}_TOKEN, or run [bold]commit-counter auth {platform}[/bold]"
        )
        raise typer.Exit(1)

    settings = resolve_settings(
        {
            "username": username or config.get_username(platform) or "",
            "access_token": access_token,
            "user_email_addresses": emails or [],
            "user_names": names or [],
            "from_date": from_date,
            "until_date": until_date,
            "min_commits": min_commits,
            "max_concurrency": max_concurrency,
        }
    )

    try:
        result = asyncio.run(_run_count(platform, settings, base_url, timeout))
    except TimeoutError:
        print(f"[red]Counting timed out after {timeout:g} seconds[/red]")
        raise typer.Exit(1)
    except UnknownPlatformError as e:
        print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        print("\n[yellow]Counting cancelled by user[/yellow]")
        raise typer.Exit(130)

    if as_json:
        typer.echo(json.dumps(result.to_dict()))
    else:
        _print_result(platform, settings, result)


@app.command()
def auth(
    platform: str = typer.Argument(..., help="Platform the token is for"),
) -> None:
    """Store an access token for a platform (interactive setup)."""
    platform = platform.lower()
    if platform not in PLATFORMS:
        print(f"[red]Error: Unknown platform '{platform}'[/red]")
        raise typer.Exit(1)

    config = Config()
    if config.get_token(platform):
        print(f"[green]✓[/green] You already have a {platform} token stored locally")
        if not Confirm.ask("Would you like to replace it with a new token?"):
            return

    username = Prompt.ask(f"[cyan]Enter your {platform} username", default="")
    token = Prompt.ask(f"[cyan]Enter your {platform} access token", password=True)

    if not token:
        print("[red]No token provided[/red]")
        return

    config.set_token(platform, token, username=username or None)


@app.command()
def auth_status() -> None:
    """Show which platforms have a stored token."""
    config = Config()
    info = config.get_config_info()

    table = Table(title="Authentication Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Config File", info["config_file"])
    for platform in sorted(PLATFORMS):
        has_token = platform in info["platforms"]
        table.add_row(f"{platform} token", "✓ Yes" if has_token else "✗ No")

    if info["config_exists"]:
        table.add_row("File Permissions", info["config_file_permissions"] or "unknown")

    print(table)


@app.command()
def auth_remove(
    platform: str = typer.Argument(..., help="Platform whose token to remove"),
) -> None:
    """Remove a stored access token."""
    platform = platform.lower()
    config = Config()

    if not config.get_token(platform):
        print(f"[yellow]No {platform} token is currently stored[/yellow]")
        return

    if Confirm.ask(f"[red]Are you sure you want to remove the stored {platform} token?[/red]"):
        config.remove_token(platform)
    else:
        print("Token removal cancelled")
