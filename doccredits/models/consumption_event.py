"""ConsumptionEvent model — append-only record of credits charged per document."""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from doccredits.models.base import CreatedAtMixin, new_uuid


class ConsumptionEvent(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "consumption_events"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    school_id: uuid.UUID = Field(foreign_key="schools.id", nullable=False, index=True)
    document_type_id: uuid.UUID = Field(foreign_key="document_types.id", nullable=False, index=True)

    credits_charged: int = Field(nullable=False)
    balance_after: int = Field(nullable=False)
    reference: str | None = Field(default=None, max_length=255)


# ── Pydantic schemas ─────────────────────────────────────────

class ConsumeRequest(SQLModel):
    reference: str | None = Field(default=None, max_length=255)


class ConsumptionEventRead(SQLModel):
    id: uuid.UUID
    school_id: uuid.UUID
    document_type_id: uuid.UUID
    credits_charged: int
    balance_after: int
    reference: str | None
    created_at: datetime


class DocumentUsage(SQLModel):
    document_type_id: uuid.UUID
    code: str
    name: str
    name_bn: str
    category: str
    is_active: bool
    schools_with_access: int
    total_uses: int
    credits_charged: int
    average_credits_per_use: float
