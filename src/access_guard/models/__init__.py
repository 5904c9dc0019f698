"""ORM model registry — import all models so Alembic autogenerate discovers them."""

from access_guard.models.access_log import AccessLog
from access_guard.models.delivery import Delivery
from access_guard.models.guest_code import GuestCode
from access_guard.models.guest_visit import GuestVisit
from access_guard.models.notification import Notification
from access_guard.models.resident import Resident
from access_guard.models.user import User

__all__ = [
    "AccessLog",
    "Delivery",
    "GuestCode",
    "GuestVisit",
    "Notification",
    "Resident",
    "User",
]
