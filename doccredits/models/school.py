"""School model — the tenant isolation boundary and owner of the credit balance."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel

from doccredits.models.base import TimestampMixin, new_uuid


class PlanType(StrEnum):
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class SchoolStatus(StrEnum):
    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    EXPIRED = "expired"


# Statuses in which a school may be granted documents and consume credits.
OPERATIONAL_STATUSES = frozenset({SchoolStatus.TRIAL, SchoolStatus.ACTIVE})

STATUS_TRANSITIONS: dict[SchoolStatus, frozenset[SchoolStatus]] = {
    SchoolStatus.TRIAL: frozenset({SchoolStatus.ACTIVE}),
    SchoolStatus.ACTIVE: frozenset({SchoolStatus.SUSPENDED, SchoolStatus.EXPIRED}),
    SchoolStatus.SUSPENDED: frozenset({SchoolStatus.ACTIVE}),
    SchoolStatus.EXPIRED: frozenset(),
}

# Balance columns are int4 in Postgres
MAX_CREDIT_BALANCE = 2_147_483_647


class School(TimestampMixin, SQLModel, table=True):
    __tablename__ = "schools"
    __table_args__ = (
        CheckConstraint("used_credits >= 0", name="ck_schools_used_non_negative"),
        CheckConstraint("used_credits <= total_credits", name="ck_schools_available_non_negative"),
    )

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    subdomain: str = Field(max_length=100, unique=True, nullable=False, index=True)
    contact_email: str = Field(max_length=320, nullable=False)
    contact_phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)

    plan: PlanType = Field(default=PlanType.BASIC)
    status: SchoolStatus = Field(default=SchoolStatus.TRIAL)
    trial_expires_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))

    # Balance columns are written only by directory.adjust_credits
    total_credits: int = Field(default=0, nullable=False)
    used_credits: int = Field(default=0, nullable=False)

    api_token_hash: str = Field(max_length=64, unique=True, nullable=False, index=True)
    api_token_prefix: str = Field(max_length=8, nullable=False)

    @property
    def available_credits(self) -> int:
        return self.total_credits - self.used_credits


# ── Pydantic schemas ─────────────────────────────────────────

class SchoolCreate(SQLModel):
    name: str = Field(max_length=255)
    contact_email: str = Field(max_length=320)
    contact_phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)
    subdomain: str | None = Field(default=None, max_length=100)
    plan: PlanType = PlanType.BASIC


class SchoolRead(SQLModel):
    id: uuid.UUID
    name: str
    subdomain: str
    contact_email: str
    contact_phone: str | None
    address: str | None
    plan: PlanType
    status: SchoolStatus
    trial_expires_at: datetime | None
    total_credits: int
    used_credits: int
    available_credits: int
    created_at: datetime
    updated_at: datetime


class SchoolCreated(SQLModel):
    school: SchoolRead
    api_token: str = Field(description="Shown once — store it securely")
    token_prefix: str


class SchoolStatusUpdate(SQLModel):
    status: SchoolStatus
