"""``access-guard`` command line: API server, migrations, accounts, housekeeping."""

import typer

from access_guard.cli.db_cmd import db_app
from access_guard.cli.maintenance_cmd import maintenance_app
from access_guard.cli.user_cmd import user_app
from access_guard.core.config import get_settings
from access_guard.core.logging import setup_logging

app = typer.Typer(name="access-guard", help="Residential community access control", no_args_is_help=True)
app.add_typer(db_app, name="db", help="Apply or roll back schema migrations")
app.add_typer(user_app, name="user", help="Create and list accounts")
app.add_typer(maintenance_app, name="maintenance", help="Expire stale guest codes, purge old notifications")


@app.callback()
def _configure_logging() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),  # noqa: S104
    port: int = typer.Option(5000, "--port", help="Bind port"),
    workers: int = typer.Option(1, "--workers", min=1, help="Worker processes (ignored with --reload)"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
) -> None:
    """Run the HTTP and WebSocket API under uvicorn."""
    import uvicorn

    uvicorn.run(
        "access_guard.main:create_app",
        factory=True,
        host=host,
        port=port,
        workers=None if reload else workers,
        reload=reload,
    )
