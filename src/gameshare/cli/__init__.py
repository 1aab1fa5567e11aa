"""CLI commands using Typer."""

import typer

from gameshare.cli.db import app as db_app
from gameshare.cli.games import app as games_app
from gameshare.cli.maintenance import app as maintenance_app
from gameshare.cli.members import app as members_app
from gameshare.cli.reports import app as reports_app

app = typer.Typer(name="gameshare", help="GameShare CLI")

# Register sub-apps
app.add_typer(db_app, name="db")
app.add_typer(members_app, name="members")
app.add_typer(games_app, name="games")
app.add_typer(reports_app, name="reports")
app.add_typer(maintenance_app, name="maintenance")


@app.callback()
def main():
    """Configure logging before any command runs."""
    from gameshare.logging import setup_logging

    setup_logging()


@app.command()
def version():
    """Show version information."""
    from gameshare import __version__

    typer.echo(f"GameShare v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the API server."""
    import uvicorn

    from gameshare.logging import get_uvicorn_log_config

    uvicorn.run(
        "gameshare.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=get_uvicorn_log_config(),
    )


if __name__ == "__main__":
    app()
