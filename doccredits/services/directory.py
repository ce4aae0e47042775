"""Tenant directory — school identity, plan, status and credit balance.

``adjust_credits`` is the single writer of the balance columns. It applies the
change as one conditional UPDATE so two concurrent debits can never both pass
the balance check against the same stale value.
"""

import logging
import re
import secrets
import uuid
from collections.abc import Collection
from datetime import timedelta

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from doccredits.core.config import get_settings
from doccredits.core.database import run_in_transaction
from doccredits.core.errors import (
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    TenantInactiveError,
    ValidationError,
)
from doccredits.core.security import generate_api_token, hash_api_token
from doccredits.models.base import utcnow
from doccredits.models.credit_transaction import CreditKind, CreditTransaction
from doccredits.models.school import (
    MAX_CREDIT_BALANCE,
    STATUS_TRANSITIONS,
    School,
    SchoolCreate,
    SchoolStatus,
)

logger = logging.getLogger(__name__)

_SUBDOMAIN_RE = re.compile(r"^[a-z0-9](?:[a-z0-9\-]{0,98}[a-z0-9])?$")


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug[:90] or "school"


def _normalize_email(raw: str) -> str:
    try:
        return validate_email(raw.strip(), check_deliverability=False).normalized
    except EmailNotValidError as exc:
        raise ValidationError(f"invalid contact email: {exc}") from exc


async def _subdomain_taken(session: AsyncSession, subdomain: str) -> bool:
    result = await session.execute(select(School.id).where(School.subdomain == subdomain))
    return result.first() is not None


async def create_school(session: AsyncSession, data: SchoolCreate) -> tuple[School, str]:
    """Register a tenant in trial status with an empty balance.

    Returns the school and its raw API token, which is not stored.
    """
    name = data.name.strip()
    if not name:
        raise ValidationError("school name is required")
    if not data.contact_email or not data.contact_email.strip():
        raise ValidationError("contact email is required")
    contact_email = _normalize_email(data.contact_email)

    requested = data.subdomain.strip().lower() if data.subdomain else None
    if requested is not None and not _SUBDOMAIN_RE.match(requested):
        raise ValidationError(
            "subdomain may only contain lowercase letters, digits and hyphens"
        )

    raw_token = generate_api_token()
    settings = get_settings()

    async def _work(sess: AsyncSession) -> School:
        if requested is not None:
            if await _subdomain_taken(sess, requested):
                raise ValidationError(f"subdomain '{requested}' is already taken")
            subdomain = requested
        else:
            subdomain = _slugify(name)
            while await _subdomain_taken(sess, subdomain):
                subdomain = f"{_slugify(name)}-{secrets.token_hex(2)}"

        school = School(
            name=name,
            subdomain=subdomain,
            contact_email=contact_email,
            contact_phone=data.contact_phone,
            address=data.address,
            plan=data.plan,
            status=SchoolStatus.TRIAL,
            trial_expires_at=utcnow() + timedelta(days=settings.trial_days),
            total_credits=0,
            used_credits=0,
            api_token_hash=hash_api_token(raw_token),
            api_token_prefix=raw_token[:8],
        )
        sess.add(school)
        await sess.flush()
        return school

    try:
        school = await run_in_transaction(session, _work)
    except IntegrityError as exc:
        raise ValidationError("school subdomain is already taken") from exc

    logger.info("Registered school %s (%s)", school.id, school.subdomain)
    return school, raw_token


async def get_school(session: AsyncSession, school_id: uuid.UUID) -> School:
    school = await session.get(School, school_id, populate_existing=True)
    if school is None:
        raise NotFoundError(f"school {school_id} not found")
    return school


async def get_school_by_token(session: AsyncSession, raw_token: str) -> School | None:
    result = await session.execute(
        select(School)
        .where(School.api_token_hash == hash_api_token(raw_token))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_schools(
    session: AsyncSession, status: SchoolStatus | None = None
) -> list[School]:
    stmt = (
        select(School)
        .order_by(School.name.asc())  # type: ignore[union-attr]
        .execution_options(populate_existing=True)
    )
    if status is not None:
        stmt = stmt.where(School.status == status)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def adjust_credits(
    session: AsyncSession,
    school_id: uuid.UUID,
    delta: int,
    require_statuses: Collection[SchoolStatus] | None = None,
) -> School:
    """Atomically add ``delta`` to a school's balance.

    A positive delta raises ``total_credits`` as long as the total stays within
    ``MAX_CREDIT_BALANCE``; a negative one raises ``used_credits`` only if
    enough credits are available. With ``require_statuses`` the school must
    also be in one of those statuses. Every condition is checked in the same
    UPDATE statement. Does not commit; the caller owns the transaction.
    """
    if delta == 0:
        raise ValidationError("credit adjustment must be non-zero")
    if abs(delta) > MAX_CREDIT_BALANCE:
        raise ValidationError(f"credit adjustment may not exceed {MAX_CREDIT_BALANCE}")

    now = utcnow()
    conditions = [School.id == school_id]
    if require_statuses is not None:
        conditions.append(School.status.in_(list(require_statuses)))  # type: ignore[attr-defined]
    if delta > 0:
        conditions.append(School.total_credits <= MAX_CREDIT_BALANCE - delta)
        values = {"total_credits": School.total_credits + delta}
    else:
        cost = -delta
        conditions.append(School.total_credits - School.used_credits >= cost)
        values = {"used_credits": School.used_credits + cost}
    stmt = (
        update(School)
        .where(*conditions)
        .values(updated_at=now, **values)
        .execution_options(synchronize_session=False)
    )

    result = await session.execute(stmt)
    school = await session.get(School, school_id, populate_existing=True)
    if school is None:
        raise NotFoundError(f"school {school_id} not found")
    if result.rowcount == 0:
        if require_statuses is not None and school.status not in require_statuses:
            raise TenantInactiveError(
                f"school {school_id} is {school.status}; documents are unavailable"
            )
        if delta > 0:
            raise ValidationError(
                f"credit balance may not exceed {MAX_CREDIT_BALANCE}; "
                f"school has {school.total_credits}"
            )
        raise InsufficientBalanceError(
            f"insufficient balance: need {-delta}, have {school.available_credits}",
            needed=-delta,
            available=school.available_credits,
        )
    return school


async def top_up(
    session: AsyncSession,
    school_id: uuid.UUID,
    amount: int,
    kind: CreditKind = CreditKind.PURCHASE,
    description: str = "",
    reference: str | None = None,
) -> CreditTransaction:
    """Add credits to a school and record the transaction."""
    if amount <= 0:
        raise ValidationError("top-up amount must be a positive number of credits")

    async def _work(sess: AsyncSession) -> CreditTransaction:
        school = await adjust_credits(sess, school_id, amount)
        tx = CreditTransaction(
            school_id=school_id,
            kind=kind,
            amount=amount,
            description=description,
            reference=reference,
            balance_after=school.available_credits,
        )
        sess.add(tx)
        await sess.flush()
        return tx

    tx = await run_in_transaction(session, _work)
    logger.info(
        "Added %d credits (%s) to school %s, balance now %d",
        amount, kind, school_id, tx.balance_after,
    )
    return tx


async def set_status(
    session: AsyncSession, school_id: uuid.UUID, new_status: SchoolStatus
) -> School:
    """Move a school to ``new_status`` if the transition table allows it."""

    async def _work(sess: AsyncSession) -> School:
        school = await get_school(sess, school_id)
        current = SchoolStatus(school.status)
        if new_status not in STATUS_TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"cannot change school status from {current} to {new_status}"
            )
        school.status = new_status
        school.updated_at = utcnow()
        sess.add(school)
        await sess.flush()
        return school

    school = await run_in_transaction(session, _work)
    logger.info("School %s status set to %s", school_id, new_status)
    return school


async def list_credit_transactions(
    session: AsyncSession, school_id: uuid.UUID
) -> list[CreditTransaction]:
    await get_school(session, school_id)
    stmt = (
        select(CreditTransaction)
        .where(CreditTransaction.school_id == school_id)
        .order_by(CreditTransaction.created_at.desc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
