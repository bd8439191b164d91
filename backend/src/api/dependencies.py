"""FastAPI dependencies for injection."""
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import Settings, get_settings
from core.tokens import TokenClaims, TokenError, decode_token
from services.identity_service import IdentityService

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme; missing header falls through to the cookie
security = HTTPBearer(auto_error=False)


def get_identity_service(request: Request) -> IdentityService:
    """Return the identity service built by the application lifespan."""
    return request.app.state.identity_service


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    """
    Validate the caller's bearer token.

    The token is taken from the ``Authorization: Bearer`` header, or failing that
    from the JWT cookie. Every validation failure is the same 401 so callers
    cannot tell which check rejected the token.
    """
    token = credentials.credentials if credentials else request.cookies.get(settings.cookie_name)
    if not token:
        raise _unauthorized()
    try:
        return decode_token(token, settings.jwt_secret_key)
    except TokenError as e:
        logger.info("token_rejected reason=%s", type(e).__name__)
        raise _unauthorized() from e


__all__ = [
    "get_current_claims",
    "get_identity_service",
    "get_settings",
]
