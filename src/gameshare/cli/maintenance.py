"""Maintenance CLI commands."""

import asyncio
from datetime import timedelta

import typer
from rich.console import Console
from rich.table import Table

from gameshare.database import get_session_context
from gameshare.services.maintenance import cleanup_orphaned_blobs, storage_usage

console = Console()
app = typer.Typer(help="Maintenance and cleanup commands")


@app.command("cleanup-blobs")
def cleanup_blobs(
    dry_run: bool = typer.Option(True, "--dry-run/--execute", help="Only report, don't delete"),
    min_age_minutes: int = typer.Option(
        15, "--min-age-minutes", min=0, help="Leave blobs modified more recently than this"
    ),
):
    """Find and remove orphaned game image blobs from storage.

    By default runs in dry-run mode to show what would be deleted.
    Use --execute to actually delete orphaned blobs.
    """

    async def _cleanup():
        console.print("[cyan]Scanning for orphaned blobs...[/cyan]")

        async with get_session_context() as session:
            result = await cleanup_orphaned_blobs(
                session, dry_run=dry_run, min_age=timedelta(minutes=min_age_minutes)
            )

        table = Table(title="Blob Cleanup Results")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Database References", str(result.db_references))
        table.add_row("Storage Blobs", str(result.storage_blobs))
        table.add_row("Orphaned Blobs", str(len(result.orphaned)))
        table.add_row("Too Recent", str(len(result.skipped_recent)))

        if dry_run:
            table.add_row("Would Delete", str(len(result.orphaned)))
        else:
            table.add_row("Deleted", str(result.deleted_count))
            if result.failed_deletions:
                table.add_row("Failed", str(len(result.failed_deletions)))

        console.print(table)

        if dry_run and result.orphaned:
            console.print("\n[yellow]Dry run mode - no files were deleted.[/yellow]")
            console.print("Run with --execute to delete orphaned blobs.")

        if not result.success:
            raise typer.Exit(1)

    asyncio.run(_cleanup())


@app.command("storage-stats")
def storage_stats():
    """Show storage usage statistics."""

    async def _stats():
        by_prefix = await storage_usage()

        table = Table(title="Storage Statistics")
        table.add_column("Category", style="cyan")
        table.add_column("Files", justify="right")
        table.add_column("Size", justify="right")

        for prefix, stats in sorted(by_prefix.items()):
            table.add_row(prefix, str(stats["count"]), _format_size(stats["size"]))

        total_count = sum(stats["count"] for stats in by_prefix.values())
        total_size = sum(stats["size"] for stats in by_prefix.values())
        table.add_row("─" * 15, "─" * 8, "─" * 10, style="dim")
        table.add_row("Total", str(total_count), _format_size(total_size), style="bold")

        console.print(table)

    asyncio.run(_stats())


def _format_size(size: float) -> str:
    """Format bytes as human-readable size."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"
