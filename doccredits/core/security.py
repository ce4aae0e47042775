"""Security utilities: provider key check and school API tokens."""

import hashlib
import hmac
import secrets

from doccredits.core.config import get_settings

settings = get_settings()


# ── School API tokens (SHA-256, deterministic for lookups) ────

def hash_api_token(raw_token: str) -> str:
    """One-way SHA-256 hash for API token storage.

    Tokens are looked up by hash on every document request, so the hash must
    be deterministic. The raw token has 256 bits of entropy.
    """
    return hashlib.sha256(raw_token.encode()).hexdigest()


def generate_api_token() -> str:
    """Generate a cryptographically secure 256-bit API token."""
    return secrets.token_urlsafe(32)


# ── Provider control panel ────────────────────────────────────

def verify_super_admin_key(candidate: str | None) -> bool:
    """Constant-time comparison against SUPER_ADMIN_KEY.

    An unset key rejects everything.
    """
    if not settings.super_admin_key or not candidate:
        return False
    return hmac.compare_digest(candidate.encode(), settings.super_admin_key.encode())
