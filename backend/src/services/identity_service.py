"""
Identity service: registration, login, and cache-aside account reads.

The account store is the source of truth. The cache only ever holds sanitized
copies populated on a read miss. Mutations commit to the store first and then
delete the cache entry; they never write a new value into the cache, so the next
read repopulates from the store.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID

import anyio
import jwt
from sqlalchemy.exc import SQLAlchemyError

from core.account_cache import AccountCache
from core.passwords import (
    PasswordHashingError,
    hash_password,
    verify_against_decoy,
    verify_password,
)
from core.tokens import DEFAULT_EXPIRE_MINUTES, issue_token
from schemas.account import (
    AccountCreate,
    AccountRecord,
    AccountUpdate,
    AccountWithToken,
    LoginRequest,
)
from schemas.validators import (
    normalize_account_create,
    normalize_account_update,
    normalize_email,
    validate_account_create,
    validate_account_update,
    validate_login,
)
from services.account_store import AccountStore
from services.exceptions import (
    EmailAlreadyExistsError,
    IdentityError,
    InternalServiceError,
    InvalidCredentialsError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

# Cache DEL attempts before falling back to EXPIRE 0
INVALIDATE_ATTEMPTS = 2


@contextmanager
def _operation(name: str) -> Iterator[None]:
    """Tag escaping identity errors with the operation name; hide store errors."""
    try:
        yield
    except IdentityError as e:
        if e.operation is None:
            e.operation = name
        raise
    except SQLAlchemyError as e:
        logger.error("%s store failure: %s", name, e)
        raise InternalServiceError(operation=name) from e


def prepare_create(data: AccountCreate) -> AccountCreate:
    """Normalize and validate a registration payload."""
    normalized = normalize_account_create(data)
    violations = validate_account_create(normalized)
    if violations:
        raise ValidationFailedError(violations)
    return normalized


def prepare_update(data: AccountUpdate) -> AccountUpdate:
    """Normalize and validate a partial update payload."""
    normalized = normalize_account_update(data)
    violations = validate_account_update(normalized)
    if violations:
        raise ValidationFailedError(violations)
    return normalized


class IdentityService:
    """Account lifecycle and authentication on top of the store and the cache."""

    def __init__(
        self,
        store: AccountStore,
        cache: AccountCache,
        jwt_secret: str,
        token_expire_minutes: int = DEFAULT_EXPIRE_MINUTES,
        cache_ttl: int = AccountCache.CACHE_TTL,
    ) -> None:
        self._store = store
        self._cache = cache
        self._jwt_secret = jwt_secret
        self._token_expire_minutes = token_expire_minutes
        self._cache_ttl = cache_ttl

    def _issue_token(self, account: AccountRecord, operation: str) -> str:
        try:
            return issue_token(
                account.id,
                account.email,
                self._jwt_secret,
                expires_minutes=self._token_expire_minutes,
            )
        except jwt.PyJWTError as e:
            logger.error("%s token issuance failed: %s", operation, e)
            raise InternalServiceError(operation=operation) from e

    async def _invalidate(self, account_id: UUID, operation: str) -> None:
        """
        Drop the cached copy after a committed store write.

        Tries DEL, then DEL again, then EXPIRE 0. Never raises: the store write
        has already committed.
        """
        for attempt in range(INVALIDATE_ATTEMPTS):
            if await self._cache.delete(account_id):
                return
            logger.warning(
                "%s cache delete failed account_id=%s attempt=%s",
                operation,
                account_id,
                attempt + 1,
            )
        if await self._cache.expire_now(account_id):
            return
        logger.error(
            "%s cache invalidation failed account_id=%s", operation, account_id,
        )

    async def register(self, data: AccountCreate) -> AccountWithToken:
        """
        Create an account and issue a token for it.

        The email pre-check is only a shortcut. The store's unique index decides,
        so a concurrent registration that slips past the pre-check still fails
        with EmailAlreadyExistsError.
        """
        operation = "identity.register"
        with _operation(operation):
            email = normalize_email(data.email)
            if email:
                try:
                    existing = await self._store.find_by_email(email)
                except SQLAlchemyError as e:
                    logger.warning("%s email pre-check skipped: %s", operation, e)
                    existing = None
                if existing is not None:
                    raise EmailAlreadyExistsError

            prepared = prepare_create(data)
            try:
                password_hash = await anyio.to_thread.run_sync(
                    hash_password, prepared.password,
                )
            except PasswordHashingError as e:
                raise InternalServiceError from e

            account = await self._store.create(prepared, password_hash)
            account.sanitize()
            token = self._issue_token(account, operation)

        logger.info("account_registered account_id=%s", account.id)
        return AccountWithToken(user=account, token=token)

    async def login(self, credentials: LoginRequest) -> AccountWithToken:
        """
        Authenticate by email and password and issue a token.

        Always reads the store (never the cache) so the current hash is checked.
        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        operation = "identity.login"
        with _operation(operation):
            violations = validate_login(credentials)
            if violations:
                raise ValidationFailedError(violations)

            account = await self._store.find_by_email(normalize_email(credentials.email))
            if account is None:
                # Burn a hash check anyway so response time does not reveal the miss
                await anyio.to_thread.run_sync(verify_against_decoy, credentials.password)
                raise InvalidCredentialsError
            matched = await anyio.to_thread.run_sync(
                verify_password, account.password, credentials.password,
            )
            if not matched:
                raise InvalidCredentialsError

            account.sanitize()
            token = self._issue_token(account, operation)

        logger.info("account_login account_id=%s", account.id)
        return AccountWithToken(user=account, token=token)

    async def update(self, account_id: UUID, data: AccountUpdate) -> AccountRecord:
        """Apply a partial update, then drop the cached copy."""
        operation = "identity.update"
        with _operation(operation):
            prepared = prepare_update(data)
            account = await self._store.update_by_id(account_id, prepared)
            account.sanitize()
        await self._invalidate(account_id, operation)
        return account

    async def delete(self, account_id: UUID) -> None:
        """Delete an account, then drop the cached copy."""
        operation = "identity.delete"
        with _operation(operation):
            await self._store.delete_by_id(account_id)
        await self._invalidate(account_id, operation)
        logger.info("account_deleted account_id=%s", account_id)

    async def get_by_id(self, account_id: UUID) -> AccountRecord:
        """
        Cache-aside read.

        A cached entry is returned as is: only sanitized records are ever
        written to the cache. On a miss the store is read and the cache
        repopulated; failing to repopulate is logged, not raised.
        """
        operation = "identity.get_by_id"
        cached = await self._cache.get_by_id(account_id)
        if cached is not None:
            return cached

        with _operation(operation):
            account = await self._store.get_by_id(account_id)
        account.sanitize()
        if not await self._cache.set(account, self._cache_ttl):
            logger.warning("%s cache populate failed account_id=%s", operation, account_id)
        return account
