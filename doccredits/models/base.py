"""Shared base fields for all models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class CreatedAtMixin(SQLModel):
    """Creation stamp for append-only ledger rows."""

    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, index=True, sa_type=DateTime(timezone=True)
    )


class TimestampMixin(SQLModel):
    """Created / updated timestamps for mutable rows."""

    created_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True))
