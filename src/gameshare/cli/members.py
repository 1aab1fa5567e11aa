"""Member management CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from sqlmodel import select

from gameshare.database import get_session_context
from gameshare.models import Member, MemberRole
from gameshare.services.auth import create_token

console = Console()
app = typer.Typer(help="Member management commands")


async def _get_member_by_email(session, email: str) -> Member | None:
    result = await session.execute(select(Member).where(Member.email == email))
    return result.scalar_one_or_none()


@app.command("list")
def list_members():
    """List all members."""

    async def _list():
        async with get_session_context() as session:
            result = await session.execute(select(Member).order_by(Member.email))
            members = result.scalars().all()

            table = Table(title="Members")
            table.add_column("ID", style="cyan")
            table.add_column("Email", style="green")
            table.add_column("Nickname")
            table.add_column("Role", style="magenta")
            table.add_column("Created", style="dim")

            for member in members:
                role_str = "[green]ADMIN[/green]" if member.is_admin else member.role.value
                created = member.created_at.strftime("%Y-%m-%d") if member.created_at else "-"
                table.add_row(member.id, member.email, member.nickname, role_str, created)

            console.print(table)

    asyncio.run(_list())


@app.command("create")
def create_member(
    email: str = typer.Argument(..., help="Member email"),
    nickname: str = typer.Option(..., "--nickname", "-n", help="Display nickname"),
    admin: bool = typer.Option(False, "--admin", help="Make member an admin"),
):
    """Create a new member."""

    async def _create():
        async with get_session_context() as session:
            if await _get_member_by_email(session, email):
                console.print(f"[red]Error:[/red] Member {email} already exists")
                raise typer.Exit(1)

            role = MemberRole.ADMIN if admin else MemberRole.USER
            member = Member(email=email, nickname=nickname, role=role)
            session.add(member)
            await session.commit()
            console.print(f"[green]Created member:[/green] {email} ({nickname}) id={member.id} role={role.value}")

    asyncio.run(_create())


@app.command("grant-admin")
def grant_admin(email: str = typer.Argument(..., help="Member email")):
    """Grant the ADMIN role to a member."""

    async def _grant():
        async with get_session_context() as session:
            member = await _get_member_by_email(session, email)

            if not member:
                console.print(f"[red]Error:[/red] Member {email} not found")
                raise typer.Exit(1)

            if member.is_admin:
                console.print(f"[yellow]Warning:[/yellow] Member {email} is already an admin")
                return

            member.role = MemberRole.ADMIN
            await session.commit()
            console.print(f"[green]Granted admin to:[/green] {email}")

    asyncio.run(_grant())


@app.command("token")
def issue_token(email: str = typer.Argument(..., help="Member email")):
    """Issue an API bearer token for a member."""

    async def _token():
        async with get_session_context() as session:
            member = await _get_member_by_email(session, email)

            if not member:
                console.print(f"[red]Error:[/red] Member {email} not found")
                raise typer.Exit(1)

            # Plain output so the token can be piped
            typer.echo(create_token(member))

    asyncio.run(_token())
