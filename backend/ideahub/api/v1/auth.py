from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.api.deps import get_current_user
from ideahub.config import get_settings
from ideahub.database import get_db
from ideahub.models.user import User
from ideahub.schemas.auth import (
    RefreshTokenRequest,
    TokenResponse,
    UserLoginRequest,
    UserRegisterRequest,
    UserResponse,
)
from ideahub.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_auth_cookie(response: Response, tokens: dict) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=tokens["access_token"],
        max_age=tokens["expires_in"],
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(body: UserRegisterRequest, db: AsyncSession = Depends(get_db)):
    """Register a new user account."""
    user = await AuthService.register(
        db=db, email=body.email, password=body.password, name=body.name
    )
    return user


@router.post("/login", response_model=TokenResponse)
async def login(
    body: UserLoginRequest, response: Response, db: AsyncSession = Depends(get_db)
):
    """Login and receive JWT tokens. The access token is also set as a cookie."""
    tokens = await AuthService.login(db=db, email=body.email, password=body.password)
    _set_auth_cookie(response, tokens)
    return tokens


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    body: RefreshTokenRequest, response: Response, db: AsyncSession = Depends(get_db)
):
    """Refresh the access token using a refresh token."""
    tokens = await AuthService.refresh_token(db=db, refresh_token=body.refresh_token)
    _set_auth_cookie(response, tokens)
    return tokens


@router.post("/logout")
async def logout(response: Response):
    """Clear the session cookie."""
    response.delete_cookie(get_settings().AUTH_COOKIE_NAME)
    return {"message": "Signed out"}


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the current authenticated user's profile."""
    return current_user
