"""Authentication router for registration, login and logout."""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.auth.jwt import create_access_token
from threadboard.config import settings
from threadboard.database import get_db
from threadboard.middleware.rate_limit import limiter
from threadboard.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from threadboard.services.accounts import AccountService

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


def _issue(response: Response, uid: int) -> TokenResponse:
    token = create_access_token(uid)
    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        secure=True,
        samesite="strict",
        max_age=settings.access_token_expire_minutes * 60,
    )
    return TokenResponse(uid=uid, access_token=token)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.register_rate_limit)
async def register(
    request: Request,
    data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    Create a new account and start a session.

    The display name defaults to ``#<uid>`` until changed in the profile.
    """
    uid = await AccountService(db).register(data.mail, data.password)
    return _issue(response, uid)


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """Authenticate by mail or name and start a session."""
    uid = await AccountService(db).authenticate(data.acct, data.password)
    return _issue(response, uid)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def logout(response: Response) -> None:
    """End the cookie session."""
    response.delete_cookie("access_token")
