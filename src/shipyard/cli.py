"""Command-line entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState for the invocation
- Register the ``remote`` and ``config`` command groups
- Render ShipyardError as a message plus suggestion and exit non-zero
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, NoReturn

import structlog
import typer

from shipyard import __version__
from shipyard.classifier import is_remote_reference
from shipyard.config import Settings
from shipyard.errors import SUPPORTED_REFERENCE_FORMS, ShipyardError
from shipyard.loader import (
    DEFAULT_CONFIG_PATH,
    load_project_config,
    load_remote_config,
    load_remote_template,
)
from shipyard.models.config import RepoType
from shipyard.state import AppState, open_app_state

if TYPE_CHECKING:
    from shipyard.models.cache import CacheEntry
    from shipyard.models.config import ProjectConfig

log = structlog.get_logger()

app = typer.Typer(
    name="shipyard",
    help="Shipyard - shared release configuration for your projects",
    no_args_is_help=True,
)
remote_app = typer.Typer(
    help="Manage remote configuration sources.",
    no_args_is_help=True,
)
cache_app = typer.Typer(help="Manage the remote configuration cache.", no_args_is_help=True)
template_app = typer.Typer(help="Manage remote templates.", no_args_is_help=True)
config_app = typer.Typer(help="Inspect the project configuration.", no_args_is_help=True)

app.add_typer(remote_app, name="remote")
app.add_typer(config_app, name="config")
remote_app.add_typer(cache_app, name="cache")
remote_app.add_typer(template_app, name="template")


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(level: str, fmt: str) -> None:
    """Configure structlog. Called once per invocation before any log statements."""
    log_level = logging.getLevelNamesMapping()[level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if fmt == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout carries command output
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _state(ctx: typer.Context) -> AppState:
    return ctx.obj


def _fail(prefix: str, error: ShipyardError) -> NoReturn:
    log.debug("command_failed", code=error.code, message=error.message)
    typer.echo(f"Error: {prefix}: {error.message}", err=True)
    if error.suggestion:
        typer.echo(error.suggestion, err=True)
    raise typer.Exit(code=1)


def _print_config_summary(config: ProjectConfig) -> None:
    typer.echo(f"Type: {config.type}")
    typer.echo(f"Repository: {config.repo}")
    typer.echo(f"Changelog Template: {config.changelog.template}")

    if config.type is RepoType.MONOREPO:
        typer.echo(f"Packages ({len(config.packages)}):")
        for pkg in config.packages:
            typer.echo(f"  - {pkg.name} ({pkg.ecosystem}) at {pkg.path}")
    elif config.package is not None:
        pkg = config.package
        typer.echo(f"Package: {pkg.name} ({pkg.ecosystem}) at {pkg.path}")

    if config.change_types:
        typer.echo(f"Change Types ({len(config.change_types)}):")
        for ct in config.change_types:
            typer.echo(f"  - {ct.name}: {ct.display_name} ({ct.semver_bump})")


def _cache_status(entry: CacheEntry, now: datetime) -> str:
    expires_at = entry.expires_at
    if expires_at is None:
        return "No expiry"
    if entry.expired:
        return "EXPIRED"
    remaining_minutes = int((expires_at - now).total_seconds() // 60)
    return f"Valid (expires in {remaining_minutes}m)"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"shipyard {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log fetch diagnostics to stderr"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version information",
        ),
    ] = False,
) -> None:
    settings = Settings()
    _setup_logging("DEBUG" if verbose else settings.logging.level, settings.logging.format)
    ctx.obj = ctx.with_resource(open_app_state(settings))


# ---------------------------------------------------------------------------
# shipyard remote ...
# ---------------------------------------------------------------------------

FreshOption = Annotated[
    bool,
    typer.Option("--fresh", "-f", help="Force fresh fetch (ignore cache)"),
]


@remote_app.command("fetch")
def remote_fetch(
    ctx: typer.Context,
    reference: Annotated[str, typer.Argument(help="Remote configuration reference")],
    fresh: FreshOption = False,
) -> None:
    """Fetch and display a remote configuration.

    GitHub shorthand references try SSH first, then HTTPS.
    """
    log.info("remote_fetch", reference=reference, fresh=fresh)
    try:
        config = load_remote_config(reference, _state(ctx).resolver, force_fresh=fresh)
    except ShipyardError as exc:
        _fail("Failed to fetch remote configuration", exc)

    typer.echo(f"Remote Configuration from: {reference}")
    typer.echo("----------------------------------------")
    _print_config_summary(config)


@remote_app.command("validate")
def remote_validate(
    ctx: typer.Context,
    reference: Annotated[str, typer.Argument(help="Remote configuration reference")],
) -> None:
    """Check that a reference is well formed, reachable and a valid base config."""
    if not is_remote_reference(reference):
        typer.echo(f"Error: Invalid remote URL format: {reference}", err=True)
        typer.echo("Supported formats:", err=True)
        for form in SUPPORTED_REFERENCE_FORMS:
            typer.echo(f"  - {form}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"✓ URL format is valid: {reference}")

    try:
        # Always fresh: the point is to prove the source is reachable now
        config = load_remote_config(reference, _state(ctx).resolver, force_fresh=True)
    except ShipyardError as exc:
        _fail("Remote configuration is not usable", exc)

    typer.echo("✓ Remote configuration is accessible")
    typer.echo("✓ Configuration is valid")
    typer.echo("")
    typer.echo("Configuration Summary:")
    typer.echo(f"  Type: {config.type}")
    typer.echo(f"  Repository: {config.repo}")
    typer.echo("")
    typer.echo("✓ Remote configuration is valid and ready to use!")


@cache_app.command("list")
def cache_list(ctx: typer.Context) -> None:
    """List cached remote configurations and templates."""
    entries = _state(ctx).cache.list()
    if not entries:
        typer.echo("No cached remote configurations found.")
        return

    now = datetime.now(UTC)
    typer.echo(f"Cached Remote Configurations ({len(entries)}):")
    typer.echo("========================================")
    for i, entry in enumerate(entries, start=1):
        typer.echo(f"{i}. URL: {entry.url}")
        typer.echo(f"   Hash: {entry.hash[:12]}...")
        typer.echo(f"   Last Fetched: {entry.last_fetched.isoformat(timespec='seconds')}")
        typer.echo(f"   TTL: {entry.ttl} minutes")
        typer.echo(f"   Status: {_cache_status(entry, now)}")
        typer.echo("")


@cache_app.command("clear")
def cache_clear(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Remove every cached remote configuration and template."""
    if not yes and not typer.confirm(
        "Are you sure you want to clear all cached remote configurations?"
    ):
        typer.echo("Operation cancelled.")
        return

    try:
        removed = _state(ctx).cache.clear()
    except OSError as exc:
        typer.echo(f"Error: Failed to clear cache: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Remote configuration cache cleared successfully ({removed} entries).")


@template_app.command("fetch")
def template_fetch(
    ctx: typer.Context,
    reference: Annotated[str, typer.Argument(help="Remote template reference")],
    fresh: FreshOption = False,
) -> None:
    """Fetch and display a remote template."""
    try:
        content = load_remote_template(reference, _state(ctx).resolver, force_fresh=fresh)
    except ShipyardError as exc:
        _fail("Failed to fetch remote template", exc)

    typer.echo(f"Remote Template from: {reference}")
    typer.echo("========================================")
    typer.echo(content)


# ---------------------------------------------------------------------------
# shipyard config ...
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    config_path: Annotated[
        Path,
        typer.Option("--config", "-c", help="Path to the project config file"),
    ] = DEFAULT_CONFIG_PATH,
    fresh: FreshOption = False,
) -> None:
    """Show the effective project configuration, including inherited settings."""
    try:
        config = load_project_config(_state(ctx).resolver, config_path, force_fresh=fresh)
    except ShipyardError as exc:
        _fail("Failed to load configuration", exc)

    if config.extends:
        typer.echo(f"Extends: {config.extends}")
    _print_config_summary(config)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
