"""FastAPI dependencies for provider-admin and school authentication."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from doccredits.core.database import get_session
from doccredits.core.security import verify_super_admin_key
from doccredits.models.school import School
from doccredits.services import directory

bearer_scheme = HTTPBearer()


async def require_super_admin(
    x_super_admin_key: Annotated[str | None, Header()] = None,
) -> None:
    """Gate for provider control-panel routes."""
    if not verify_super_admin_key(x_super_admin_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required",
        )


async def get_current_school(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> School:
    """Resolve a school API token to its school."""
    school = await directory.get_school_by_token(session, credentials.credentials)
    if school is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid school API token",
        )
    return school


# Typed shorthand for use in route signatures
CurrentSchool = Annotated[School, Depends(get_current_school)]
Session = Annotated[AsyncSession, Depends(get_session)]
SuperAdmin = Depends(require_super_admin)
