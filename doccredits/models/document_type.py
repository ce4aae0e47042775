"""DocumentType model — one entry of the provider's document menu."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Text
from sqlmodel import Column, Field, SQLModel

from doccredits.models.base import TimestampMixin, new_uuid


class DocumentType(TimestampMixin, SQLModel, table=True):
    __tablename__ = "document_types"
    __table_args__ = (
        CheckConstraint("base_credit_cost > 0", name="ck_document_types_cost_positive"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    code: str = Field(max_length=100, unique=True, nullable=False, index=True)
    name: str = Field(max_length=255, nullable=False)
    name_bn: str = Field(default="", max_length=255)
    category: str = Field(default="general", max_length=100, index=True)
    description: str = Field(default="", sa_column=Column(Text, nullable=False, server_default=""))
    base_credit_cost: int = Field(default=1, nullable=False)
    is_active: bool = Field(default=True, index=True)


# ── Pydantic schemas ─────────────────────────────────────────

class DocumentTypeCreate(SQLModel):
    code: str = Field(max_length=100)
    name: str = Field(max_length=255)
    name_bn: str = Field(default="", max_length=255)
    category: str = Field(default="general", max_length=100)
    description: str = ""
    base_credit_cost: int = 1


class DocumentTypeUpdate(SQLModel):
    name: str | None = Field(default=None, max_length=255)
    name_bn: str | None = Field(default=None, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    description: str | None = None
    base_credit_cost: int | None = None


class DocumentTypeActiveUpdate(SQLModel):
    is_active: bool


class DocumentTypeRead(SQLModel):
    id: uuid.UUID
    code: str
    name: str
    name_bn: str
    category: str
    description: str
    base_credit_cost: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
