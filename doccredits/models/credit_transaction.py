"""CreditTransaction model — append-only log of credits added to a school."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from doccredits.models.base import CreatedAtMixin, new_uuid
from doccredits.models.school import MAX_CREDIT_BALANCE


class CreditKind(StrEnum):
    PURCHASE = "purchase"
    BONUS = "bonus"
    REFUND = "refund"


class CreditTransaction(CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "credit_transactions"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    school_id: uuid.UUID = Field(foreign_key="schools.id", nullable=False, index=True)

    kind: CreditKind = Field(nullable=False)
    amount: int = Field(nullable=False)
    description: str = Field(default="", max_length=500)
    reference: str | None = Field(default=None, max_length=255)  # invoice / payment id
    balance_after: int = Field(nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class CreditTopUp(SQLModel):
    amount: int = Field(le=MAX_CREDIT_BALANCE)
    kind: CreditKind = CreditKind.PURCHASE
    description: str = Field(default="", max_length=500)
    reference: str | None = Field(default=None, max_length=255)


class CreditTransactionRead(SQLModel):
    id: uuid.UUID
    school_id: uuid.UUID
    kind: CreditKind
    amount: int
    description: str
    reference: str | None
    balance_after: int
    created_at: datetime
