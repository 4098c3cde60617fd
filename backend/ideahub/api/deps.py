from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.config import get_settings
from ideahub.core.exceptions import UnauthorizedError
from ideahub.core.security import read_access_token
from ideahub.database import get_db
from ideahub.models.user import User

security_scheme = HTTPBearer(auto_error=False)


def extract_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None = None
) -> str | None:
    """Bearer header first, then the session cookie set by the login endpoint."""
    if credentials is not None:
        return credentials.credentials
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return request.cookies.get(get_settings().AUTH_COOKIE_NAME)


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the current session's user, or None when there is no valid session."""
    user_id = read_access_token(extract_token(request, credentials))
    if user_id is None:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    user: User | None = Depends(get_optional_user),
) -> User:
    """Require an authenticated user."""
    if user is None:
        raise UnauthorizedError("Authentication required")
    return user
