"""School tenant administration — provider control panel only."""

import uuid

from fastapi import APIRouter, Query, status

from doccredits.api.deps import Session, SuperAdmin
from doccredits.models.consumption_event import ConsumptionEventRead
from doccredits.models.credit_transaction import CreditTopUp, CreditTransactionRead
from doccredits.models.school import (
    SchoolCreate,
    SchoolCreated,
    SchoolRead,
    SchoolStatus,
    SchoolStatusUpdate,
)
from doccredits.services import directory, ledger

router = APIRouter(prefix="/schools", tags=["schools"], dependencies=[SuperAdmin])


@router.post(
    "",
    response_model=SchoolCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new school tenant",
)
async def create_school(body: SchoolCreate, session: Session) -> SchoolCreated:
    """Create a school in trial status with zero credits.

    The raw API token is returned once — the school must store it.
    """
    school, raw_token = await directory.create_school(session, body)
    return SchoolCreated(
        school=SchoolRead.model_validate(school),
        api_token=raw_token,
        token_prefix=school.api_token_prefix,
    )


@router.get("", response_model=list[SchoolRead])
async def list_schools(
    session: Session,
    school_status: SchoolStatus | None = Query(default=None, alias="status"),
) -> list[SchoolRead]:
    schools = await directory.list_schools(session, school_status)
    return [SchoolRead.model_validate(s) for s in schools]


@router.get("/{school_id}", response_model=SchoolRead)
async def get_school(school_id: uuid.UUID, session: Session) -> SchoolRead:
    return SchoolRead.model_validate(await directory.get_school(session, school_id))


@router.patch("/{school_id}/status", response_model=SchoolRead)
async def set_school_status(
    school_id: uuid.UUID,
    body: SchoolStatusUpdate,
    session: Session,
) -> SchoolRead:
    school = await directory.set_status(session, school_id, body.status)
    return SchoolRead.model_validate(school)


@router.post(
    "/{school_id}/credits",
    response_model=CreditTransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add credits to a school",
)
async def top_up_credits(
    school_id: uuid.UUID,
    body: CreditTopUp,
    session: Session,
) -> CreditTransactionRead:
    tx = await directory.top_up(
        session,
        school_id,
        body.amount,
        kind=body.kind,
        description=body.description,
        reference=body.reference,
    )
    return CreditTransactionRead.model_validate(tx)


@router.get("/{school_id}/credit-transactions", response_model=list[CreditTransactionRead])
async def list_credit_transactions(
    school_id: uuid.UUID, session: Session
) -> list[CreditTransactionRead]:
    txs = await directory.list_credit_transactions(session, school_id)
    return [CreditTransactionRead.model_validate(t) for t in txs]


@router.get("/{school_id}/consumption", response_model=list[ConsumptionEventRead])
async def list_school_consumption(
    school_id: uuid.UUID,
    session: Session,
    limit: int = Query(default=100, ge=1, le=1000),
) -> list[ConsumptionEventRead]:
    events = await ledger.list_consumption(session, school_id, limit)
    return [ConsumptionEventRead.model_validate(e) for e in events]
