# Thrive - Multi-Tenant Assessment Report Platform
# Copyright (c) 2026 George Scott Foley
# ORCID: 0009-0006-4957-0540
# Email: Georgescottfoley@proton.me
# Licensed under the MIT License - see LICENSE file for details

"""
Command Line Interface

Usage:
    thrive init-db                 # Create tables (development databases)
    thrive stats                   # Demo account statistics
    thrive users                   # Lifecycle view of every demo account
    thrive warn                    # Send expiration warnings now
    thrive cleanup --dry-run       # Preview demo cleanup
    thrive cleanup --execute       # Export, anonymize and deactivate
    thrive status                  # Cleanup job configuration and last runs
"""

import asyncio
import json

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="thrive", help="Thrive - Multi-Tenant Assessment Report Platform")
console = Console()


def _setup_logging(settings) -> None:
    from .observability.logging import configure_logging

    configure_logging(
        level=settings.observability.level,
        format="human" if settings.is_development else settings.observability.format,
        mask_sensitive=settings.observability.mask_sensitive,
    )


async def _with_services(action):
    from .bootstrap import build_services
    from .core.settings import get_settings

    settings = get_settings()
    _setup_logging(settings)
    services = await build_services(settings)
    try:
        return await action(services)
    finally:
        await services.close()


# ============================================================
# DATABASE COMMANDS
# ============================================================


@app.command("init-db")
def init_db():
    """Create all tables from ORM metadata."""

    async def _init():
        from .core.settings import get_settings
        from .data.database import Database

        settings = get_settings()
        _setup_logging(settings)
        database = Database(settings.database)
        await database.init(create_tables=True)
        await database.close()

    asyncio.run(_init())
    console.print("[green]Database tables created.[/]")


# ============================================================
# DEMO LIFECYCLE COMMANDS
# ============================================================


@app.command()
def stats():
    """Show demo account statistics."""

    async def _stats(services):
        return await services.scheduler.get_cleanup_stats()

    result = asyncio.run(_with_services(_stats))

    table = Table(title="Demo Accounts")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white", justify="right")
    table.add_row("Total demo users", str(result.total_demo_users))
    table.add_row("Active demo users", str(result.active_demo_users))
    table.add_row("Needing warning", str(result.users_needing_warning))
    table.add_row("Expired (pending cleanup)", str(result.expired_users))
    table.add_row("Demo reports", str(result.total_demo_reports))
    console.print(table)


@app.command()
def users():
    """List every demo account with its lifecycle state."""

    async def _users(services):
        return await services.scheduler.get_demo_users_cleanup_info()

    infos = asyncio.run(_with_services(_users))

    if not infos:
        console.print("[yellow]No demo users found.[/]")
        return

    table = Table(title=f"Demo Users ({len(infos)})")
    table.add_column("ID", style="dim")
    table.add_column("Username", style="cyan")
    table.add_column("Reports", justify="right")
    table.add_column("Expires", style="white")
    table.add_column("Days left", justify="right")
    table.add_column("State")
    table.add_column("Active")

    state_styles = {"active": "green", "warning": "yellow", "expired": "red"}
    for info in infos:
        style = state_styles.get(info.state.value, "white")
        table.add_row(
            str(info.id),
            info.username,
            str(info.report_count),
            info.expiration_date.strftime("%Y-%m-%d"),
            str(info.days_until_expiration),
            f"[{style}]{info.state.value}[/]",
            "yes" if info.is_active else "no",
        )
    console.print(table)


@app.command()
def warn():
    """Send expiration warnings to demo users in their warning window."""

    async def _warn(services):
        return await services.cleanup_job.trigger_manual_warnings()

    summary = asyncio.run(_with_services(_warn))
    _print_summary(summary)


@app.command()
def cleanup(
    dry_run: bool = typer.Option(
        True, "--dry-run/--execute", help="Preview only, or export and deactivate"
    ),
):
    """Clean up expired demo accounts."""
    if not dry_run:
        typer.confirm(
            "This will anonymize and deactivate every expired demo account. Continue?",
            abort=True,
        )

    async def _cleanup(services):
        return await services.cleanup_job.trigger_manual_cleanup(dry_run=dry_run)

    summary = asyncio.run(_with_services(_cleanup))
    _print_summary(summary)
    if summary.status == "failed" or summary.result.get("errors"):
        raise typer.Exit(1)


@app.command()
def status():
    """Show cleanup job configuration."""

    async def _status(services):
        return services.cleanup_job.get_job_status()

    result = asyncio.run(_with_services(_status))

    table = Table(title="Demo Cleanup Job")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    for key, value in result["config"].items():
        table.add_row(key, str(value))
    table.add_row("is_enabled", str(result["is_enabled"]))
    table.add_row("admin_email_configured", str(result["admin_email_configured"]))
    console.print(table)


def _print_summary(summary) -> None:
    style = {"completed": "green", "failed": "red"}.get(summary.status.value, "yellow")
    title = f"{summary.job} [{style}]{summary.status.value}[/]"
    if summary.dry_run:
        title += " [dim](dry run)[/]"
    console.print(title)

    if summary.error:
        console.print(f"[red]{summary.error}[/]")

    table = Table()
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    for key, value in summary.result.items():
        if isinstance(value, list):
            value = json.dumps(value, indent=2) if value else "-"
        table.add_row(key, str(value))
    if summary.result:
        console.print(table)


# ============================================================
# UTILITY COMMANDS
# ============================================================


@app.command()
def version():
    """Show version information."""
    from . import __version__

    console.print(f"Thrive v{__version__}")


# ============================================================
# MAIN
# ============================================================


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
