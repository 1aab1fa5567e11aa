"""Game inspection CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import col, select

from gameshare.database import get_session_context
from gameshare.errors import GameNotFoundError
from gameshare.models import Game, Member
from gameshare.services import games as game_service

console = Console()
app = typer.Typer(help="Game inspection commands")


@app.command("list")
def list_games(
    limit: int = typer.Option(50, "--limit", "-l", help="Maximum number of games to show"),
):
    """List games, most recent first."""

    async def _list():
        async with get_session_context() as session:
            stmt = (
                select(Game, Member.nickname)
                .join(Member, Member.id == Game.member_id)  # type: ignore[arg-type]
                .order_by(col(Game.created_at).desc())
                .limit(limit)
            )
            rows = (await session.execute(stmt)).all()

            table = Table(title="Games")
            table.add_column("ID", style="cyan")
            table.add_column("Title", style="green")
            table.add_column("Owner", style="yellow")
            table.add_column("Stars", style="blue", justify="right")
            table.add_column("Created", style="dim")

            for game, nickname in rows:
                table.add_row(
                    game.id,
                    game.title,
                    nickname,
                    str(game.starred_count),
                    game.created_at.strftime("%Y-%m-%d") if game.created_at else "-",
                )

            console.print(table)

    asyncio.run(_list())


@app.command("show")
def show_game(game_id: str = typer.Argument(..., help="Game ID")):
    """Show details for a game."""

    async def _show():
        async with get_session_context() as session:
            try:
                game = await game_service.get_game(session, game_id)
            except GameNotFoundError:
                console.print(f"[red]Error:[/red] Game '{game_id}' not found")
                raise typer.Exit(1) from None

            console.print(f"[bold]{game.title}[/bold]")
            console.print(f"  ID: [cyan]{game.id}[/cyan]")
            console.print(f"  Owner: [yellow]{game.nickname}[/yellow] ({game.member_id})")
            console.print(f"  Stars: [blue]{game.starred_count}[/blue]")
            console.print(f"  Thumbnail: {game.thumbnail_url}")
            if game.description:
                desc = game.description[:200] + "..." if len(game.description) > 200 else game.description
                console.print(f"  Description: {desc}")

            for image in game.images:
                console.print(f"  [{image.position}] {image.image_url} [dim]{image.description}[/dim]")

    asyncio.run(_show())
