"""Schema migration commands, driving Alembic from ``alembic.ini``."""

import typer
from loguru import logger

db_app = typer.Typer()


def _alembic_config():  # type: ignore[no-untyped-def]
    from alembic.config import Config

    return Config("alembic.ini")


@db_app.command()
def upgrade(revision: str = typer.Argument("head", help="Revision to migrate up to")) -> None:
    """Migrate the schema forward."""
    from alembic import command

    logger.info("Migrating schema up to {}", revision)
    command.upgrade(_alembic_config(), revision)


@db_app.command()
def downgrade(revision: str = typer.Argument("-1", help="Revision to migrate down to")) -> None:
    """Step the schema back (one revision by default)."""
    from alembic import command

    logger.info("Migrating schema down to {}", revision)
    command.downgrade(_alembic_config(), revision)


@db_app.command()
def current() -> None:
    """Print the revision the database is at."""
    from alembic import command

    command.current(_alembic_config(), verbose=True)


@db_app.command()
def history() -> None:
    """Print the migration history."""
    from alembic import command

    command.history(_alembic_config())
