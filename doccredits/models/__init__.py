"""Import all models so SQLModel.metadata picks them up."""

from doccredits.models.consumption_event import (
    ConsumeRequest,
    ConsumptionEvent,
    ConsumptionEventRead,
    DocumentUsage,
)
from doccredits.models.credit_transaction import (
    CreditKind,
    CreditTopUp,
    CreditTransaction,
    CreditTransactionRead,
)
from doccredits.models.document_type import (
    DocumentType,
    DocumentTypeActiveUpdate,
    DocumentTypeCreate,
    DocumentTypeRead,
    DocumentTypeUpdate,
)
from doccredits.models.permission_grant import (
    AvailableDocument,
    BulkAction,
    BulkPermissionRequest,
    BulkPermissionResult,
    GrantRequest,
    GrantState,
    GrantStatus,
    PermissionGrant,
    PermissionGrantRead,
)
from doccredits.models.school import (
    PlanType,
    School,
    SchoolCreate,
    SchoolCreated,
    SchoolRead,
    SchoolStatus,
    SchoolStatusUpdate,
)

__all__ = [
    "AvailableDocument",
    "BulkAction",
    "BulkPermissionRequest",
    "BulkPermissionResult",
    "ConsumeRequest",
    "ConsumptionEvent",
    "ConsumptionEventRead",
    "CreditKind",
    "CreditTopUp",
    "CreditTransaction",
    "CreditTransactionRead",
    "DocumentType",
    "DocumentTypeActiveUpdate",
    "DocumentTypeCreate",
    "DocumentTypeRead",
    "DocumentTypeUpdate",
    "DocumentUsage",
    "GrantRequest",
    "GrantState",
    "GrantStatus",
    "PermissionGrant",
    "PermissionGrantRead",
    "PlanType",
    "School",
    "SchoolCreate",
    "SchoolCreated",
    "SchoolRead",
    "SchoolStatus",
    "SchoolStatusUpdate",
]
