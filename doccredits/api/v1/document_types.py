"""Document type catalog — provider editing plus the public active menu."""

import uuid

from fastapi import APIRouter, status

from doccredits.api.deps import Session, SuperAdmin
from doccredits.models.document_type import (
    DocumentTypeActiveUpdate,
    DocumentTypeCreate,
    DocumentTypeRead,
    DocumentTypeUpdate,
)
from doccredits.services import catalog

router = APIRouter(prefix="/document-types", tags=["document-types"], dependencies=[SuperAdmin])
public_router = APIRouter(prefix="/catalog", tags=["document-types"])


@public_router.get("", response_model=list[DocumentTypeRead])
async def list_active_document_types(session: Session) -> list[DocumentTypeRead]:
    """Active document types, ordered by name."""
    return [DocumentTypeRead.model_validate(d) for d in await catalog.list_active(session)]


@router.get("", response_model=list[DocumentTypeRead])
async def list_document_types(session: Session) -> list[DocumentTypeRead]:
    return [DocumentTypeRead.model_validate(d) for d in await catalog.list_all(session)]


@router.post("", response_model=DocumentTypeRead, status_code=status.HTTP_201_CREATED)
async def create_document_type(body: DocumentTypeCreate, session: Session) -> DocumentTypeRead:
    return DocumentTypeRead.model_validate(await catalog.create_document_type(session, body))


@router.get("/{document_type_id}", response_model=DocumentTypeRead)
async def get_document_type(document_type_id: uuid.UUID, session: Session) -> DocumentTypeRead:
    doc_type = await catalog.get_document_type_any(session, document_type_id)
    return DocumentTypeRead.model_validate(doc_type)


@router.patch("/{document_type_id}", response_model=DocumentTypeRead)
async def update_document_type(
    document_type_id: uuid.UUID,
    body: DocumentTypeUpdate,
    session: Session,
) -> DocumentTypeRead:
    doc_type = await catalog.update_document_type(session, document_type_id, body)
    return DocumentTypeRead.model_validate(doc_type)


@router.put("/{document_type_id}/active", response_model=DocumentTypeRead)
async def set_document_type_active(
    document_type_id: uuid.UUID,
    body: DocumentTypeActiveUpdate,
    session: Session,
) -> DocumentTypeRead:
    doc_type = await catalog.set_active(session, document_type_id, body.is_active)
    return DocumentTypeRead.model_validate(doc_type)
