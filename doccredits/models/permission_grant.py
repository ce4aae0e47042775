"""PermissionGrant model — whether, and at what price, a school may use a document type."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, Text, UniqueConstraint
from sqlmodel import Column, Field, SQLModel

from doccredits.models.base import TimestampMixin, new_uuid


class GrantState(StrEnum):
    UNSET = "unset"
    GRANTED = "granted"
    REVOKED = "revoked"


class PermissionGrant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "permission_grants"
    __table_args__ = (
        UniqueConstraint("school_id", "document_type_id", name="uq_permission_grants_school_document"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    school_id: uuid.UUID = Field(foreign_key="schools.id", nullable=False, index=True)
    document_type_id: uuid.UUID = Field(foreign_key="document_types.id", nullable=False, index=True)

    is_allowed: bool = Field(default=False, nullable=False)
    # None means "charge the document type's base cost"
    credits_per_use: int | None = Field(default=None)

    granted_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    revoked_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    granted_by: str = Field(default="", max_length=255)
    notes: str | None = Field(default=None, sa_column=Column(Text))

    @property
    def state(self) -> GrantState:
        return GrantState.GRANTED if self.is_allowed else GrantState.REVOKED


# ── Pydantic schemas ─────────────────────────────────────────

class GrantRequest(SQLModel):
    credits_per_use: int | None = None
    granted_by: str = Field(max_length=255)
    notes: str | None = None


class BulkAction(StrEnum):
    GRANT = "grant"
    REVOKE = "revoke"


class BulkPermissionRequest(SQLModel):
    document_type_ids: list[uuid.UUID]
    action: BulkAction = BulkAction.GRANT
    credits_per_use: int | None = None
    granted_by: str = Field(default="", max_length=255)


class BulkPermissionResult(SQLModel):
    school_id: uuid.UUID
    action: BulkAction
    document_count: int


class PermissionGrantRead(SQLModel):
    id: uuid.UUID
    school_id: uuid.UUID
    document_type_id: uuid.UUID
    is_allowed: bool
    state: GrantState
    credits_per_use: int | None
    granted_at: datetime | None
    revoked_at: datetime | None
    granted_by: str
    notes: str | None
    updated_at: datetime


class GrantStatus(SQLModel):
    school_id: uuid.UUID
    document_type_id: uuid.UUID
    state: GrantState
    is_allowed: bool
    effective_cost: int | None = None
    granted_at: datetime | None = None
    revoked_at: datetime | None = None
    granted_by: str | None = None


class AvailableDocument(SQLModel):
    document_type_id: uuid.UUID
    code: str
    name: str
    name_bn: str
    category: str
    credits_per_use: int
