"""
Lifecycle steps applied by the repositories around each write.

These replace ORM event hooks: the persistence wrapper calls them explicitly
before inserting, updating or deleting a row.
"""
import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "TODO"
DEFAULT_PRIORITY = "MEDIUM"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Aware UTC copy of ``value``. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def mark_created(entity) -> None:
    now = utc_now()
    if hasattr(entity, "created_at"):
        entity.created_at = now
    if hasattr(entity, "updated_at"):
        entity.updated_at = now
    if hasattr(entity, "version"):
        entity.version = 1
        if not entity.status:
            entity.status = DEFAULT_STATUS
        if not entity.priority:
            entity.priority = DEFAULT_PRIORITY
    logger.debug("%s created: %s", type(entity).__name__, _label(entity))


def mark_updated(entity) -> None:
    if hasattr(entity, "updated_at"):
        entity.updated_at = utc_now()
    logger.debug("%s updated: %s", type(entity).__name__, _label(entity))


def mark_deleted(entity) -> None:
    logger.debug("%s deleted: %s", type(entity).__name__, _label(entity))


def _label(entity) -> str:
    for attr in ("title", "name", "username"):
        value = getattr(entity, attr, None)
        if value:
            return value
    return str(getattr(entity, "id", "?"))
