"""Housekeeping commands for cron: stale guest codes and expired notifications."""

import asyncio

import typer
from loguru import logger

maintenance_app = typer.Typer()


@maintenance_app.command("purge-notifications")
def purge_notifications() -> None:
    """Delete notifications past their expiry."""
    from access_guard.services.notification_service import purge_expired_notifications

    count = asyncio.run(_run_in_session(purge_expired_notifications))
    typer.echo(f"Purged {count} expired notification(s)")


@maintenance_app.command("expire-codes")
def expire_codes() -> None:
    """Settle active guest codes whose validity window has closed."""
    from access_guard.services.guest_code_service import expire_stale_codes

    count = asyncio.run(_run_in_session(expire_stale_codes))
    typer.echo(f"Expired {count} guest code(s)")


async def _run_in_session(job) -> int:  # type: ignore[no-untyped-def]
    from access_guard.core.config import get_settings
    from access_guard.core.database import standalone_session

    settings = get_settings()
    async with standalone_session(settings.database_url, schema=settings.database_schema) as session:
        count = await job(session)
    logger.info("{} affected {} row(s)", job.__name__, count)
    return count
