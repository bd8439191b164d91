"""Account registration, login, and self-service endpoints."""
import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.dependencies import get_current_claims, get_identity_service, get_settings
from core.config import Settings
from core.tokens import TokenClaims
from schemas.account import (
    AccountCreate,
    AccountRecord,
    AccountResponse,
    AccountUpdate,
    AccountWithToken,
    AccountWithTokenResponse,
    LoginRequest,
)
from services.identity_service import IdentityService

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_token_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.cookie_max_age,
        path="/",
        secure=settings.cookie_secure,
        httponly=settings.cookie_http_only,
    )


def _require_self(claims: TokenClaims, account_id: UUID) -> None:
    if claims.account_id != account_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post(
    "/register",
    response_model=AccountWithTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    data: AccountCreate,
    response: Response,
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
) -> AccountWithToken:
    """Register a new account. Returns the account and a bearer token."""
    async with asyncio.timeout(settings.request_timeout_seconds):
        result = await service.register(data)
    _set_token_cookie(response, result.token, settings)
    return result


@router.post("/login", response_model=AccountWithTokenResponse)
async def login(
    data: LoginRequest,
    response: Response,
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
) -> AccountWithToken:
    """
    Log in with email and password.

    Unknown email and wrong password both return the same 401.
    """
    async with asyncio.timeout(settings.request_timeout_seconds):
        result = await service.login(data)
    _set_token_cookie(response, result.token, settings)
    return result


@router.get("/me", response_model=AccountResponse)
async def get_me(
    claims: TokenClaims = Depends(get_current_claims),
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
) -> AccountRecord:
    """Get the account the bearer token was issued for."""
    async with asyncio.timeout(settings.request_timeout_seconds):
        return await service.get_by_id(claims.account_id)


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: UUID,
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
) -> AccountRecord:
    """Get an account by id."""
    async with asyncio.timeout(settings.request_timeout_seconds):
        return await service.get_by_id(account_id)


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: UUID,
    data: AccountUpdate,
    claims: TokenClaims = Depends(get_current_claims),
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
) -> AccountRecord:
    """
    Update your own account.

    Empty or omitted fields are left unchanged.
    """
    _require_self(claims, account_id)
    async with asyncio.timeout(settings.request_timeout_seconds):
        return await service.update(account_id, data)


@router.delete("/{account_id}")
async def delete_account(
    account_id: UUID,
    response: Response,
    claims: TokenClaims = Depends(get_current_claims),
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, str]:
    """Delete your own account."""
    _require_self(claims, account_id)
    async with asyncio.timeout(settings.request_timeout_seconds):
        await service.delete(account_id)
    response.delete_cookie(settings.cookie_name, path="/")
    return {str(account_id): "Deleted"}
