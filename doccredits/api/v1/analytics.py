"""Usage analytics for the provider control panel."""

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import func
from sqlmodel import select

from doccredits.api.deps import Session, SuperAdmin
from doccredits.models.consumption_event import ConsumptionEvent, DocumentUsage
from doccredits.models.school import School, SchoolStatus
from doccredits.services import ledger

router = APIRouter(prefix="/analytics", tags=["analytics"], dependencies=[SuperAdmin])


# ── Schemas ──────────────────────────────────────────────────

class CreditOverview(BaseModel):
    schools: int
    schools_by_status: dict[str, int]
    total_credits_issued: int
    total_credits_used: int
    total_credits_available: int
    documents_generated: int


# ── Routes ───────────────────────────────────────────────────

@router.get("/document-usage", response_model=list[DocumentUsage])
async def get_document_usage(session: Session) -> list[DocumentUsage]:
    """Per document type: schools with access, uses and credits charged."""
    return await ledger.document_usage_analytics(session)


@router.get("/overview", response_model=CreditOverview)
async def get_overview(session: Session) -> CreditOverview:
    """Platform-wide credit totals."""
    totals = (await session.execute(
        select(
            func.count(),
            func.coalesce(func.sum(School.total_credits), 0),
            func.coalesce(func.sum(School.used_credits), 0),
        ).select_from(School)
    )).one()

    status_rows = (await session.execute(
        select(School.status, func.count()).group_by(School.status)
    )).all()
    by_status = {s.value: 0 for s in SchoolStatus}
    by_status.update({str(st): count for st, count in status_rows})

    documents = (await session.execute(
        select(func.count()).select_from(ConsumptionEvent)
    )).scalar_one()

    school_count, issued, used = totals
    return CreditOverview(
        schools=school_count,
        schools_by_status=by_status,
        total_credits_issued=int(issued),
        total_credits_used=int(used),
        total_credits_available=int(issued) - int(used),
        documents_generated=documents,
    )
