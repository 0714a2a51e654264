"""Persisted list entry model."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from cinematch.models.status import Status


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class TitleEntry(BaseModel):
    """One title and its current status.

    ``title`` is stored verbatim; the store compares entries through
    ``cinematch.utils.text.title_key``. ``updated_at`` is only used for
    ordering, never to resolve a status.
    """

    title: str
    status: Status
    updated_at: datetime = Field(default_factory=_utcnow)
