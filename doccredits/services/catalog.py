"""Document type catalog — the menu of documents and their default cost."""

import logging
import re
import uuid

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from doccredits.core.catalog_defaults import DEFAULT_DOCUMENT_TYPES
from doccredits.core.database import run_in_transaction
from doccredits.core.errors import NotFoundError, ValidationError
from doccredits.models.base import utcnow
from doccredits.models.document_type import (
    DocumentType,
    DocumentTypeCreate,
    DocumentTypeUpdate,
)

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(r"^[a-z0-9_\-]+$")


def _check_cost(cost: int) -> None:
    if cost <= 0:
        raise ValidationError("base credit cost must be a positive integer")


async def list_active(session: AsyncSession) -> list[DocumentType]:
    stmt = (
        select(DocumentType)
        .where(DocumentType.is_active.is_(True))  # type: ignore[attr-defined]
        .order_by(DocumentType.name.asc(), DocumentType.id.asc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_all(session: AsyncSession) -> list[DocumentType]:
    """Provider view: every type, inactive included."""
    stmt = select(DocumentType).order_by(
        DocumentType.category.asc(),  # type: ignore[union-attr]
        DocumentType.name.asc(),  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_document_type_any(session: AsyncSession, document_type_id: uuid.UUID) -> DocumentType:
    doc_type = await session.get(DocumentType, document_type_id, populate_existing=True)
    if doc_type is None:
        raise NotFoundError(f"document type {document_type_id} not found")
    return doc_type


async def get_document_type(session: AsyncSession, document_type_id: uuid.UUID) -> DocumentType:
    """Active document type, or NotFoundError. Inactive types are invisible here."""
    doc_type = await get_document_type_any(session, document_type_id)
    if not doc_type.is_active:
        raise NotFoundError(f"document type {document_type_id} not found")
    return doc_type


async def create_document_type(session: AsyncSession, data: DocumentTypeCreate) -> DocumentType:
    code = data.code.strip().lower()
    name = data.name.strip()
    if not code or not _CODE_RE.match(code):
        raise ValidationError("code may only contain lowercase letters, digits, '_' and '-'")
    if not name:
        raise ValidationError("document type name is required")
    _check_cost(data.base_credit_cost)

    async def _work(sess: AsyncSession) -> DocumentType:
        existing = await sess.execute(select(DocumentType.id).where(DocumentType.code == code))
        if existing.first() is not None:
            raise ValidationError(f"document type code '{code}' already exists")
        doc_type = DocumentType(
            code=code,
            name=name,
            name_bn=data.name_bn,
            category=data.category,
            description=data.description,
            base_credit_cost=data.base_credit_cost,
        )
        sess.add(doc_type)
        await sess.flush()
        return doc_type

    try:
        doc_type = await run_in_transaction(session, _work)
    except IntegrityError as exc:
        raise ValidationError(f"document type code '{code}' already exists") from exc
    logger.info("Created document type %s (%s)", doc_type.id, doc_type.code)
    return doc_type


async def update_document_type(
    session: AsyncSession, document_type_id: uuid.UUID, data: DocumentTypeUpdate
) -> DocumentType:
    update_data = data.model_dump(exclude_unset=True)
    if "base_credit_cost" in update_data:
        if update_data["base_credit_cost"] is None:
            raise ValidationError("base credit cost cannot be cleared")
        _check_cost(update_data["base_credit_cost"])
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise ValidationError("document type name is required")

    async def _work(sess: AsyncSession) -> DocumentType:
        doc_type = await get_document_type_any(sess, document_type_id)
        for field, value in update_data.items():
            setattr(doc_type, field, value)
        doc_type.updated_at = utcnow()
        sess.add(doc_type)
        await sess.flush()
        return doc_type

    return await run_in_transaction(session, _work)


async def set_active(session: AsyncSession, document_type_id: uuid.UUID, active: bool) -> DocumentType:
    """Toggle visibility. Existing grants are left as they are."""

    async def _work(sess: AsyncSession) -> DocumentType:
        doc_type = await get_document_type_any(sess, document_type_id)
        doc_type.is_active = active
        doc_type.updated_at = utcnow()
        sess.add(doc_type)
        await sess.flush()
        return doc_type

    doc_type = await run_in_transaction(session, _work)
    logger.info("Document type %s %s", doc_type.code, "activated" if active else "deactivated")
    return doc_type


async def seed_default_catalog(session: AsyncSession) -> int:
    """Insert the built-in document menu if the catalog is empty.

    Returns the number of types inserted.
    """

    async def _work(sess: AsyncSession) -> int:
        count = (await sess.execute(select(func.count()).select_from(DocumentType))).scalar_one()
        if count:
            return 0
        for code, name, name_bn, category, cost in DEFAULT_DOCUMENT_TYPES:
            sess.add(DocumentType(
                code=code,
                name=name,
                name_bn=name_bn,
                category=category,
                base_credit_cost=cost,
            ))
        await sess.flush()
        return len(DEFAULT_DOCUMENT_TYPES)

    inserted = await run_in_transaction(session, _work)
    if inserted:
        logger.info("Seeded document catalog with %d types", inserted)
    return inserted
