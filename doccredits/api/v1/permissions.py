"""Document permission grants — provider control panel only."""

import uuid

from fastapi import APIRouter

from doccredits.api.deps import Session, SuperAdmin
from doccredits.models.permission_grant import (
    BulkAction,
    BulkPermissionRequest,
    BulkPermissionResult,
    GrantRequest,
    GrantStatus,
    PermissionGrantRead,
)
from doccredits.services import ledger

router = APIRouter(prefix="/schools/{school_id}", tags=["permissions"], dependencies=[SuperAdmin])


@router.post(
    "/grant-document/{document_type_id}",
    response_model=PermissionGrantRead,
    summary="Grant a document type to a school",
)
async def grant_document(
    school_id: uuid.UUID,
    document_type_id: uuid.UUID,
    body: GrantRequest,
    session: Session,
) -> PermissionGrantRead:
    """Create the grant, or update its terms if it already exists."""
    grant = await ledger.grant_permission(
        session,
        school_id,
        document_type_id,
        credits_per_use=body.credits_per_use,
        granted_by=body.granted_by,
        notes=body.notes,
    )
    return PermissionGrantRead.model_validate(grant)


@router.delete(
    "/revoke-document/{document_type_id}",
    response_model=PermissionGrantRead,
    summary="Revoke a document type from a school",
)
async def revoke_document(
    school_id: uuid.UUID,
    document_type_id: uuid.UUID,
    session: Session,
) -> PermissionGrantRead:
    grant = await ledger.revoke_permission(session, school_id, document_type_id)
    return PermissionGrantRead.model_validate(grant)


@router.post("/bulk-permissions", response_model=BulkPermissionResult)
async def bulk_permissions(
    school_id: uuid.UUID,
    body: BulkPermissionRequest,
    session: Session,
) -> BulkPermissionResult:
    """Grant or revoke several document types at once. Nothing is applied if any id fails."""
    if body.action == BulkAction.GRANT:
        grants = await ledger.bulk_grant(
            session,
            school_id,
            body.document_type_ids,
            credits_per_use=body.credits_per_use,
            granted_by=body.granted_by,
        )
    else:
        grants = await ledger.bulk_revoke(session, school_id, body.document_type_ids)
    return BulkPermissionResult(
        school_id=school_id,
        action=body.action,
        document_count=len(grants),
    )


@router.get("/permissions", response_model=list[PermissionGrantRead])
async def list_permissions(school_id: uuid.UUID, session: Session) -> list[PermissionGrantRead]:
    grants = await ledger.list_grants(session, school_id)
    return [PermissionGrantRead.model_validate(g) for g in grants]


@router.get("/document/{document_type_id}/permission", response_model=GrantStatus)
async def get_permission_status(
    school_id: uuid.UUID,
    document_type_id: uuid.UUID,
    session: Session,
) -> GrantStatus:
    return await ledger.get_grant_status(session, school_id, document_type_id)
