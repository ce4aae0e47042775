"""Business-rule errors raised by the directory, catalog and ledger services.

Each error carries the HTTP status the API layer answers with and a short
machine-readable ``code``. None of them is retried: they describe a request
that cannot succeed as sent, not a transient storage failure.
"""

from fastapi import status


class LedgerError(Exception):
    """Base class for all service-level failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "ledger_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class TenantInactiveError(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    code = "tenant_inactive"


class InvalidTransitionError(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"


class PermissionDeniedError(LedgerError):
    status_code = status.HTTP_409_CONFLICT
    code = "permission_denied"


class InsufficientBalanceError(LedgerError):
    """Raised by ``adjust_credits`` when the available balance would go negative."""

    status_code = status.HTTP_409_CONFLICT
    code = "insufficient_balance"

    def __init__(self, message: str, *, needed: int = 0, available: int = 0) -> None:
        super().__init__(message)
        self.needed = needed
        self.available = available


class InsufficientCreditsError(InsufficientBalanceError):
    """Raised by ``consume`` when a school cannot pay for a document."""

    code = "insufficient_credits"
