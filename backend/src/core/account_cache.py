"""Read-through cache of account records, keyed by account id."""
import logging
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import ValidationError

from schemas.account import AccountRecord

if TYPE_CHECKING:
    from core.redis import RedisClient

logger = logging.getLogger(__name__)

KEY_PREFIX = "api-auth"

# Cache schema version - included in all cache keys (e.g., "api-auth:v1:...")
#
# Bump this version when AccountRecord fields are added, removed, or renamed.
# Entries written with the previous schema are then never read again and expire
# naturally via TTL.
CACHE_SCHEMA_VERSION = 1


class AccountCache:
    """
    Cache of sanitized account records.

    The cache is never authoritative. Reads that fail for any reason are misses,
    and writes or deletes that fail report False so the caller can log them.
    Only sanitized records are ever stored.
    """

    CACHE_TTL = 3600  # 1 hour

    def __init__(self, redis_client: "RedisClient", ttl: int = CACHE_TTL) -> None:
        """Initialize account cache with Redis client."""
        self._redis = redis_client
        self._ttl = ttl

    @staticmethod
    def cache_key(account_id: UUID) -> str:
        """Generate cache key for an account id."""
        return f"{KEY_PREFIX}:v{CACHE_SCHEMA_VERSION}:{account_id}"

    async def get_by_id(self, account_id: UUID) -> AccountRecord | None:
        """
        Get a cached account.

        Returns:
            AccountRecord if found and decodable, None on a miss.
        """
        data = await self._redis.get(self.cache_key(account_id))
        if not data:
            logger.debug("account_cache_miss account_id=%s", account_id)
            return None
        try:
            account = AccountRecord.model_validate_json(data)
        except ValidationError:
            logger.warning("account_cache_undecodable account_id=%s", account_id)
            return None
        logger.debug("account_cache_hit account_id=%s", account_id)
        return account

    async def set(self, account: AccountRecord, ttl: int | None = None) -> bool:
        """
        Cache an account record.

        The stored payload never contains a password hash, whatever the caller
        passes in.

        Returns:
            True if the entry was written (or Redis is disabled, so there is
            nothing to write to), False if the write failed.
        """
        if not self._redis.is_connected:
            return True
        data = account.model_dump_json(exclude={"password"})
        stored = await self._redis.setex(
            self.cache_key(account.id),
            ttl if ttl is not None else self._ttl,
            data,
        )
        if stored:
            logger.debug("account_cache_set account_id=%s", account.id)
        return stored

    async def delete(self, account_id: UUID) -> bool:
        """
        Invalidate a cached account.

        Returns:
            True if the entry is gone (or Redis is disabled, so nothing can be
            cached), False if the delete could not be performed.
        """
        if not self._redis.is_connected:
            return True
        deleted = await self._redis.delete(self.cache_key(account_id))
        if deleted:
            logger.debug("account_cache_invalidate account_id=%s", account_id)
        return deleted

    async def expire_now(self, account_id: UUID) -> bool:
        """
        Evict an entry by zeroing its TTL.

        Used after ``delete`` has failed. Same fallbacks as ``delete``.
        """
        if not self._redis.is_connected:
            return True
        expired = await self._redis.expire(self.cache_key(account_id), 0)
        if expired:
            logger.debug("account_cache_expire account_id=%s", account_id)
        return expired
