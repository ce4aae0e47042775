"""School-facing endpoints, authenticated with the school's API token."""

import uuid

from fastapi import APIRouter, Query, status

from doccredits.api.deps import CurrentSchool, Session
from doccredits.models.consumption_event import ConsumeRequest, ConsumptionEventRead
from doccredits.models.permission_grant import AvailableDocument
from doccredits.models.school import SchoolRead
from doccredits.services import ledger

router = APIRouter(prefix="/me", tags=["school"])


@router.get("", response_model=SchoolRead, summary="Get current school info and balance")
async def get_me(school: CurrentSchool) -> SchoolRead:
    return SchoolRead.model_validate(school)


@router.get("/documents", response_model=list[AvailableDocument])
async def list_available_documents(
    school: CurrentSchool, session: Session
) -> list[AvailableDocument]:
    """Document types this school may generate, with the price it pays."""
    return await ledger.available_documents(session, school.id)


@router.post(
    "/documents/{document_type_id}/consume",
    response_model=ConsumptionEventRead,
    status_code=status.HTTP_201_CREATED,
    summary="Charge credits before generating a document",
)
async def consume_document(
    document_type_id: uuid.UUID,
    school: CurrentSchool,
    session: Session,
    body: ConsumeRequest | None = None,
) -> ConsumptionEventRead:
    """Must succeed before a document is rendered; any error aborts rendering."""
    event = await ledger.consume(
        session,
        school.id,
        document_type_id,
        reference=body.reference if body else None,
    )
    return ConsumptionEventRead.model_validate(event)


@router.get("/consumption", response_model=list[ConsumptionEventRead])
async def list_my_consumption(
    school: CurrentSchool,
    session: Session,
    limit: int = Query(default=100, ge=1, le=1000),
) -> list[ConsumptionEventRead]:
    events = await ledger.list_consumption(session, school.id, limit)
    return [ConsumptionEventRead.model_validate(e) for e in events]
