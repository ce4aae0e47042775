"""Grant & consumption ledger.

A grant row per (school, document type) pair says whether the school may
generate that document and what it pays per use. ``consume`` is the path
every document generation goes through: it checks the grant and the school
status, then debits the balance through ``directory.adjust_credits`` and
appends a ``ConsumptionEvent`` in the same transaction.

Grant states:

    Unset --grant--> Granted --revoke--> Revoked --grant--> Granted
    Granted --grant--> Granted (terms update)
"""

import logging
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from doccredits.core.database import run_in_transaction
from doccredits.core.errors import (
    InsufficientBalanceError,
    InsufficientCreditsError,
    NotFoundError,
    PermissionDeniedError,
    TenantInactiveError,
    ValidationError,
)
from doccredits.models.base import utcnow
from doccredits.models.consumption_event import ConsumptionEvent, DocumentUsage
from doccredits.models.document_type import DocumentType
from doccredits.models.permission_grant import (
    AvailableDocument,
    GrantState,
    GrantStatus,
    PermissionGrant,
)
from doccredits.models.school import OPERATIONAL_STATUSES, School
from doccredits.services import catalog, directory

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────

def _require_operational(school: School) -> None:
    if school.status not in OPERATIONAL_STATUSES:
        raise TenantInactiveError(
            f"school {school.id} is {school.status}; documents are unavailable"
        )


def _check_credits_per_use(credits_per_use: int | None) -> None:
    if credits_per_use is not None and credits_per_use <= 0:
        raise ValidationError("credits per use must be a positive integer")


def _effective_cost(grant: PermissionGrant, doc_type: DocumentType) -> int:
    if grant.credits_per_use is not None:
        return grant.credits_per_use
    return doc_type.base_credit_cost


async def _find_grant(
    session: AsyncSession, school_id: uuid.UUID, document_type_id: uuid.UUID
) -> PermissionGrant | None:
    stmt = (
        select(PermissionGrant)
        .where(
            PermissionGrant.school_id == school_id,
            PermissionGrant.document_type_id == document_type_id,
        )
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _upsert_grant(
    session: AsyncSession,
    school_id: uuid.UUID,
    document_type_id: uuid.UUID,
    credits_per_use: int | None,
    granted_by: str,
    notes: str | None,
) -> PermissionGrant:
    now = utcnow()
    grant = await _find_grant(session, school_id, document_type_id)
    if grant is None:
        grant = PermissionGrant(school_id=school_id, document_type_id=document_type_id)
    elif notes is None:
        notes = grant.notes

    grant.is_allowed = True
    grant.credits_per_use = credits_per_use
    grant.granted_by = granted_by
    grant.granted_at = now
    grant.revoked_at = None
    grant.notes = notes
    grant.updated_at = now
    session.add(grant)
    await session.flush()
    return grant


def _dedupe(ids: list[uuid.UUID]) -> list[uuid.UUID]:
    return list(dict.fromkeys(ids))


# ── Grants ───────────────────────────────────────────────────

async def grant_permission(
    session: AsyncSession,
    school_id: uuid.UUID,
    document_type_id: uuid.UUID,
    credits_per_use: int | None = None,
    granted_by: str = "",
    notes: str | None = None,
) -> PermissionGrant:
    """Allow a school to use a document type, creating or updating the grant row."""
    _check_credits_per_use(credits_per_use)

    async def _work(sess: AsyncSession) -> PermissionGrant:
        school = await directory.get_school(sess, school_id)
        _require_operational(school)
        await catalog.get_document_type(sess, document_type_id)
        return await _upsert_grant(
            sess, school_id, document_type_id, credits_per_use, granted_by, notes
        )

    try:
        grant = await run_in_transaction(session, _work)
    except IntegrityError:
        # A concurrent grant inserted the row first; apply ours as an update.
        grant = await run_in_transaction(session, _work)

    logger.info(
        "Granted document type %s to school %s (credits_per_use=%s, by=%s)",
        document_type_id, school_id, credits_per_use, granted_by,
    )
    return grant


async def revoke_permission(
    session: AsyncSession, school_id: uuid.UUID, document_type_id: uuid.UUID
) -> PermissionGrant:
    """Flip an existing grant to revoked. The row is kept for audit."""

    async def _work(sess: AsyncSession) -> PermissionGrant:
        grant = await _find_grant(sess, school_id, document_type_id)
        if grant is None:
            raise NotFoundError(
                f"no grant exists for school {school_id} and document type {document_type_id}"
            )
        if grant.is_allowed:
            now = utcnow()
            grant.is_allowed = False
            grant.revoked_at = now
            grant.updated_at = now
            sess.add(grant)
            await sess.flush()
        return grant

    grant = await run_in_transaction(session, _work)
    logger.info("Revoked document type %s from school %s", document_type_id, school_id)
    return grant


async def bulk_grant(
    session: AsyncSession,
    school_id: uuid.UUID,
    document_type_ids: list[uuid.UUID],
    credits_per_use: int | None = None,
    granted_by: str = "",
) -> list[PermissionGrant]:
    """Grant several document types to one school, all or nothing."""
    ids = _dedupe(document_type_ids)
    if not ids:
        raise ValidationError("document_type_ids must not be empty")
    _check_credits_per_use(credits_per_use)

    async def _work(sess: AsyncSession) -> list[PermissionGrant]:
        school = await directory.get_school(sess, school_id)
        _require_operational(school)

        result = await sess.execute(
            select(DocumentType).where(
                DocumentType.id.in_(ids),  # type: ignore[attr-defined]
                DocumentType.is_active.is_(True),  # type: ignore[attr-defined]
            )
        )
        found = {d.id for d in result.scalars().all()}
        missing = [str(i) for i in ids if i not in found]
        if missing:
            raise NotFoundError(f"document types not found or inactive: {', '.join(missing)}")

        return [
            await _upsert_grant(sess, school_id, doc_id, credits_per_use, granted_by, None)
            for doc_id in ids
        ]

    try:
        grants = await run_in_transaction(session, _work)
    except IntegrityError:
        grants = await run_in_transaction(session, _work)

    logger.info("Bulk granted %d document types to school %s", len(grants), school_id)
    return grants


async def bulk_revoke(
    session: AsyncSession,
    school_id: uuid.UUID,
    document_type_ids: list[uuid.UUID],
) -> list[PermissionGrant]:
    """Revoke several grants of one school, all or nothing."""
    ids = _dedupe(document_type_ids)
    if not ids:
        raise ValidationError("document_type_ids must not be empty")

    async def _work(sess: AsyncSession) -> list[PermissionGrant]:
        await directory.get_school(sess, school_id)
        result = await sess.execute(
            select(PermissionGrant)
            .where(
                PermissionGrant.school_id == school_id,
                PermissionGrant.document_type_id.in_(ids),  # type: ignore[attr-defined]
            )
            .execution_options(populate_existing=True)
        )
        grants = {g.document_type_id: g for g in result.scalars().all()}
        missing = [str(i) for i in ids if i not in grants]
        if missing:
            raise NotFoundError(f"no grant exists for document types: {', '.join(missing)}")

        now = utcnow()
        for grant in grants.values():
            if grant.is_allowed:
                grant.is_allowed = False
                grant.revoked_at = now
                grant.updated_at = now
                sess.add(grant)
        await sess.flush()
        return [grants[i] for i in ids]

    grants = await run_in_transaction(session, _work)
    logger.info("Bulk revoked %d document types from school %s", len(grants), school_id)
    return grants


async def get_grant_status(
    session: AsyncSession, school_id: uuid.UUID, document_type_id: uuid.UUID
) -> GrantStatus:
    await directory.get_school(session, school_id)
    doc_type = await catalog.get_document_type_any(session, document_type_id)
    grant = await _find_grant(session, school_id, document_type_id)
    if grant is None:
        return GrantStatus(
            school_id=school_id,
            document_type_id=document_type_id,
            state=GrantState.UNSET,
            is_allowed=False,
        )
    return GrantStatus(
        school_id=school_id,
        document_type_id=document_type_id,
        state=grant.state,
        is_allowed=grant.is_allowed,
        effective_cost=_effective_cost(grant, doc_type),
        granted_at=grant.granted_at,
        revoked_at=grant.revoked_at,
        granted_by=grant.granted_by,
    )


async def list_grants(session: AsyncSession, school_id: uuid.UUID) -> list[PermissionGrant]:
    await directory.get_school(session, school_id)
    stmt = (
        select(PermissionGrant)
        .where(PermissionGrant.school_id == school_id)
        .order_by(PermissionGrant.created_at.asc())  # type: ignore[union-attr]
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def available_documents(
    session: AsyncSession, school_id: uuid.UUID
) -> list[AvailableDocument]:
    """Active document types the school currently holds a grant for."""
    await directory.get_school(session, school_id)
    stmt = (
        select(PermissionGrant, DocumentType)
        .join(DocumentType, DocumentType.id == PermissionGrant.document_type_id)
        .where(
            PermissionGrant.school_id == school_id,
            PermissionGrant.is_allowed.is_(True),  # type: ignore[attr-defined]
            DocumentType.is_active.is_(True),  # type: ignore[attr-defined]
        )
        .order_by(DocumentType.name.asc())  # type: ignore[union-attr]
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return [
        AvailableDocument(
            document_type_id=doc_type.id,
            code=doc_type.code,
            name=doc_type.name,
            name_bn=doc_type.name_bn,
            category=doc_type.category,
            credits_per_use=_effective_cost(grant, doc_type),
        )
        for grant, doc_type in result.all()
    ]


# ── Consumption ──────────────────────────────────────────────

async def consume(
    session: AsyncSession,
    school_id: uuid.UUID,
    document_type_id: uuid.UUID,
    reference: str | None = None,
) -> ConsumptionEvent:
    """Charge a school for one document and record the charge.

    Raises PermissionDeniedError, TenantInactiveError, NotFoundError (inactive
    document type) or InsufficientCreditsError; on any of them the balance is
    unchanged and no event is written.
    """

    async def _work(sess: AsyncSession) -> ConsumptionEvent:
        grant = await _find_grant(sess, school_id, document_type_id)
        if grant is None or not grant.is_allowed:
            raise PermissionDeniedError(
                f"school {school_id} is not permitted to generate document type {document_type_id}"
            )

        school = await directory.get_school(sess, school_id)
        _require_operational(school)

        doc_type = await catalog.get_document_type(sess, document_type_id)
        cost = _effective_cost(grant, doc_type)

        try:
            school = await directory.adjust_credits(
                sess, school_id, -cost, require_statuses=OPERATIONAL_STATUSES
            )
        except InsufficientBalanceError as exc:
            raise InsufficientCreditsError(
                f"insufficient credits: need {cost}, have {exc.available}",
                needed=cost,
                available=exc.available,
            ) from exc

        event = ConsumptionEvent(
            school_id=school_id,
            document_type_id=document_type_id,
            credits_charged=cost,
            balance_after=school.available_credits,
            reference=reference,
        )
        sess.add(event)
        await sess.flush()
        return event

    try:
        event = await run_in_transaction(session, _work)
    except InsufficientCreditsError as exc:
        logger.warning("Consumption rejected for school %s: %s", school_id, exc.message)
        raise

    logger.info(
        "School %s consumed document type %s for %d credits (balance %d)",
        school_id, document_type_id, event.credits_charged, event.balance_after,
    )
    return event


async def list_consumption(
    session: AsyncSession, school_id: uuid.UUID, limit: int = 100
) -> list[ConsumptionEvent]:
    await directory.get_school(session, school_id)
    stmt = (
        select(ConsumptionEvent)
        .where(ConsumptionEvent.school_id == school_id)
        .order_by(ConsumptionEvent.created_at.desc())  # type: ignore[union-attr]
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def document_usage_analytics(session: AsyncSession) -> list[DocumentUsage]:
    """Per document type: schools holding a grant, uses and credits charged."""
    access_rows = await session.execute(
        select(PermissionGrant.document_type_id, func.count())
        .where(PermissionGrant.is_allowed.is_(True))  # type: ignore[attr-defined]
        .group_by(PermissionGrant.document_type_id)
    )
    access = {doc_id: count for doc_id, count in access_rows.all()}

    usage_rows = await session.execute(
        select(
            ConsumptionEvent.document_type_id,
            func.count(),
            func.coalesce(func.sum(ConsumptionEvent.credits_charged), 0),
        ).group_by(ConsumptionEvent.document_type_id)
    )
    usage = {doc_id: (uses, credits) for doc_id, uses, credits in usage_rows.all()}

    out: list[DocumentUsage] = []
    for doc_type in await catalog.list_all(session):
        uses, credits = usage.get(doc_type.id, (0, 0))
        out.append(DocumentUsage(
            document_type_id=doc_type.id,
            code=doc_type.code,
            name=doc_type.name,
            name_bn=doc_type.name_bn,
            category=doc_type.category,
            is_active=doc_type.is_active,
            schools_with_access=access.get(doc_type.id, 0),
            total_uses=uses,
            credits_charged=int(credits),
            average_credits_per_use=round(credits / uses, 2) if uses else 0.0,
        ))
    out.sort(key=lambda u: (-u.total_uses, u.name))
    return out
