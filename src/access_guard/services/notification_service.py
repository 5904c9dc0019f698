"""Notification service.

Writes inbox rows, pushes them to the owner's real-time room, and purges
expired rows. The inbox row is always committed before the push; a failed
push is logged and never undoes the write.
"""

import asyncio
import uuid
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from access_guard.core.errors import NotFoundError
from access_guard.core.realtime import get_connection_hub
from access_guard.lib.realtime import ConnectionHub, user_room
from access_guard.models.base import utcnow
from access_guard.models.notification import Notification, NotificationPriority, NotificationType
from access_guard.schemas.notification import NotificationResponse

NOTIFICATION_EVENT = "notification"


def _not_expired(now: datetime):  # type: ignore[no-untyped-def]
    return or_(Notification.expires_at.is_(None), Notification.expires_at > now)


async def push(hub: ConnectionHub | None, room: str, event: str, data: Any) -> int:
    """Best-effort emit; returns the number of sockets reached (0 on failure)."""
    hub = hub or get_connection_hub()
    try:
        return await hub.emit(room, event, data)
    except Exception:  # noqa: BLE001
        logger.warning("Real-time push of {} to {} failed", event, room)
        return 0


async def notify(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    type: str,  # noqa: A002
    title: str,
    message: str,
    data: dict[str, Any] | None = None,
    priority: str = NotificationPriority.MEDIUM,
    expires_at: datetime | None = None,
    hub: ConnectionHub | None = None,
) -> Notification:
    """Persist a notification for ``user_id`` and push it to ``user-{user_id}``.

    Args:
        session: The database session.
        user_id: Recipient account.
        type: info, alert, emergency, success, or warning.
        title: Short title.
        message: Body text.
        data: Free-form metadata (conventional key: ``event_type``).
        priority: low, medium, high, or urgent.
        expires_at: After this instant the row is treated as absent.
        hub: Real-time hub override (defaults to the process hub).

    Returns:
        The committed Notification.
    """
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        data=data or {},
        read=False,
        priority=priority,
        expires_at=expires_at,
    )
    session.add(notification)
    await session.commit()
    await session.refresh(notification)
    logger.info("Notification '{}' queued for user {}", title, user_id)

    payload = NotificationResponse.model_validate(notification).model_dump(mode="json")
    await push(hub, user_room(user_id), NOTIFICATION_EVENT, payload)
    return notification


async def notify_guest_arrival(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    guest_name: str,
    code: str,
    hub: ConnectionHub | None = None,
) -> Notification:
    return await notify(
        session,
        user_id=user_id,
        type=NotificationType.INFO,
        title="Guest Arrival",
        message=f"{guest_name} has arrived at the main gate using code {code}",
        data={"guest_name": guest_name, "guest_code": code, "event_type": "guest_arrival"},
        hub=hub,
    )


async def notify_delivery_scheduled(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    company: str,
    tracking_number: str | None = None,
    hub: ConnectionHub | None = None,
) -> Notification:
    suffix = f" ({tracking_number})" if tracking_number else ""
    return await notify(
        session,
        user_id=user_id,
        type=NotificationType.ALERT,
        title="Delivery Scheduled",
        message=f"{company} delivery scheduled{suffix}",
        data={"company": company, "tracking_number": tracking_number, "event_type": "delivery_scheduled"},
        hub=hub,
    )


async def notify_delivery_completed(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    company: str,
    hub: ConnectionHub | None = None,
) -> Notification:
    return await notify(
        session,
        user_id=user_id,
        type=NotificationType.SUCCESS,
        title="Delivery Completed",
        message=f"{company} delivery has been completed",
        data={"company": company, "event_type": "delivery_completed"},
        hub=hub,
    )


async def list_notifications(session: AsyncSession, user_id: uuid.UUID, *, limit: int = 50) -> list[Notification]:
    """Newest-first unexpired notifications for ``user_id``."""
    query = (
        select(Notification)
        .where(Notification.user_id == user_id, _not_expired(utcnow()))
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    return list((await session.execute(query)).scalars().all())


async def unread_count(session: AsyncSession, user_id: uuid.UUID) -> int:
    query = select(func.count(Notification.id)).where(
        Notification.user_id == user_id,
        Notification.read.is_(False),
        _not_expired(utcnow()),
    )
    return (await session.execute(query)).scalar_one()


async def _get_owned(session: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> Notification:
    query = select(Notification).where(
        Notification.id == notification_id,
        Notification.user_id == user_id,
        _not_expired(utcnow()),
    )
    notification = (await session.execute(query)).scalar_one_or_none()
    if notification is None:
        msg = "Notification not found"
        raise NotFoundError(msg)
    return notification


async def mark_read(session: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> Notification:
    """Mark one notification read. Re-marking keeps the original ``read_at``.

    Raises:
        NotFoundError: If the notification is missing, expired, or not owned by ``user_id``.
    """
    notification = await _get_owned(session, notification_id, user_id)
    if not notification.read:
        notification.read = True
        notification.read_at = utcnow()
        await session.commit()
        await session.refresh(notification)
    return notification


async def mark_all_read(session: AsyncSession, user_id: uuid.UUID) -> int:
    """Mark every unread notification read.

    Returns:
        Number of rows changed; a repeated call returns 0.
    """
    result = await session.execute(
        update(Notification)
        .where(
            Notification.user_id == user_id,
            Notification.read.is_(False),
            _not_expired(utcnow()),
        )
        .values(read=True, read_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount


async def delete_notification(session: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> None:
    """Delete an owned notification.

    Raises:
        NotFoundError: If the notification is missing, expired, or not owned by ``user_id``.
    """
    notification = await _get_owned(session, notification_id, user_id)
    await session.delete(notification)
    await session.commit()


async def purge_expired_notifications(session: AsyncSession) -> int:
    """Delete every notification past ``expires_at``.

    Returns:
        Number of rows deleted.
    """
    result = await session.execute(
        delete(Notification)
        .where(Notification.expires_at.is_not(None), Notification.expires_at <= utcnow())
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return result.rowcount


async def notification_purge_loop(
    interval: int,
) -> None:
    """Background asyncio loop that purges expired notifications.

    Args:
        interval: Seconds between purge cycles.
    """
    from access_guard.core.database import get_session_factory

    logger.info("Notification purge loop started (interval={}s)", interval)

    while True:
        try:
            await asyncio.sleep(interval)
            factory = get_session_factory()
            async with factory() as session:
                count = await purge_expired_notifications(session)
                if count > 0:
                    logger.info("Purged {} expired notification(s)", count)
        except asyncio.CancelledError:
            logger.info("Notification purge loop cancelled")
            break
        except Exception:
            logger.exception("Notification purge loop error")
