"""Moderation report CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from gameshare.database import get_session_context
from gameshare.services import games as game_service

console = Console()
app = typer.Typer(help="Moderation report commands")


@app.command("list")
def list_reports():
    """List game reports, newest first."""

    async def _list():
        async with get_session_context() as session:
            reports = await game_service.list_reported_games(session)

            table = Table(title="Reported Games")
            table.add_column("Game", style="cyan")
            table.add_column("Title", style="green")
            table.add_column("Type", style="magenta")
            table.add_column("Reporter", style="yellow")
            table.add_column("Owner", style="yellow")
            table.add_column("Reported", style="dim")

            for report in reports:
                table.add_row(
                    report.game_id,
                    report.game_title,
                    report.report_type.value,
                    report.report_member_nickname,
                    report.reported_member_nickname,
                    report.created_at.strftime("%Y-%m-%d %H:%M") if report.created_at else "-",
                )

            console.print(table)

    asyncio.run(_list())
