"""FastAPI application entry point."""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.errors import (
    identity_error_handler,
    request_validation_error_handler,
    timeout_error_handler,
)
from api.routers import auth, health
from core.account_cache import AccountCache
from core.config import get_settings
from core.redis import RedisClient
from db.session import build_engine, build_session_factory
from services.account_store import AccountStore
from services.exceptions import IdentityError
from services.identity_service import IdentityService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    Build the process-wide connections and the identity service at startup.

    Nothing else constructs a connection; everything downstream receives these
    objects by reference through ``app.state``.
    """
    app_settings = get_settings()

    # Startup: database pool
    engine = build_engine(app_settings)
    session_factory = build_session_factory(engine)

    # Startup: Connect to Redis
    redis_client = RedisClient(
        url=app_settings.redis_url,
        enabled=app_settings.redis_enabled,
        pool_size=app_settings.redis_pool_size,
        socket_timeout=app_settings.redis_socket_timeout,
    )
    await redis_client.connect()

    app.state.session_factory = session_factory
    app.state.redis_client = redis_client
    app.state.identity_service = IdentityService(
        store=AccountStore(session_factory),
        cache=AccountCache(redis_client, ttl=app_settings.account_cache_ttl),
        jwt_secret=app_settings.jwt_secret_key,
        token_expire_minutes=app_settings.jwt_expire_minutes,
        cache_ttl=app_settings.account_cache_ttl,
    )

    yield

    # Shutdown: Clean up Redis and the database pool
    await redis_client.close()
    await engine.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking - API shouldn't be framed
        response.headers["X-Frame-Options"] = "DENY"
        # Account payloads must not be stored by shared caches
        response.headers["Cache-Control"] = "no-store"
        return response


app_settings = get_settings()

app = FastAPI(
    title="Accounts API",
    description="Account registration, login, and bearer token issuance.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(IdentityError, identity_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(TimeoutError, timeout_error_handler)

# Security headers middleware (runs after CORS, adds headers to responses)
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
