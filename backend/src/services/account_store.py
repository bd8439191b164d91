"""
Durable account storage.

Each method runs exactly one statement in its own short transaction and commits
before returning, so a caller that invalidates the cache afterwards always does
so after the change is visible to other readers.
"""
import logging
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.account import Account
from schemas.account import AccountCreate, AccountRecord, AccountUpdate
from schemas.validators import DEFAULT_ROLE
from services.exceptions import AccountNotFoundError, EmailAlreadyExistsError

logger = logging.getLogger(__name__)

# Values that mean "leave the column as it is" in a partial update
_UNCHANGED = (None, "", 0)


def _to_record(row: Account, include_password: bool) -> AccountRecord:
    record = AccountRecord.model_validate(row)
    if not include_password:
        record.password = None
    return record


def coalesce_changes(data: AccountUpdate) -> dict[str, Any]:
    """
    Reduce an update payload to the columns that should change.

    Empty strings, zero and None are treated as "unchanged", never as "clear".
    """
    return {
        field: value
        for field, value in data.model_dump().items()
        if value not in _UNCHANGED
    }


class AccountStore:
    """CRUD over the ``accounts`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, data: AccountCreate, password_hash: str) -> AccountRecord:
        """
        Insert a new account and return the stored row (including the hash).

        Raises:
            EmailAlreadyExistsError: The unique index on email rejected the row,
                even if an earlier lookup reported the email as free.
        """
        values = data.model_dump(exclude={"password"})
        values["password"] = password_hash
        values["role"] = values["role"] or DEFAULT_ROLE
        values["first_name"] = values["first_name"] or ""
        values["last_name"] = values["last_name"] or ""
        stmt = insert(Account).values(**values).returning(Account)
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                record = _to_record(result.scalar_one(), include_password=True)
        except IntegrityError as e:
            logger.info("account_create_conflict")
            raise EmailAlreadyExistsError from e
        logger.debug("account_created account_id=%s", record.id)
        return record

    async def update_by_id(self, account_id: UUID, data: AccountUpdate) -> AccountRecord:
        """
        Apply a partial update and return the full updated row (without the hash).

        Raises:
            AccountNotFoundError: No account has this id.
            EmailAlreadyExistsError: The new email belongs to another account.
        """
        changes = coalesce_changes(data)
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(**changes, updated_at=func.now())
            .returning(Account)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
                if row is None:
                    raise AccountNotFoundError
                record = _to_record(row, include_password=False)
        except IntegrityError as e:
            logger.info("account_update_conflict account_id=%s", account_id)
            raise EmailAlreadyExistsError from e
        logger.debug(
            "account_updated account_id=%s fields=%s", account_id, sorted(changes),
        )
        return record

    async def delete_by_id(self, account_id: UUID) -> None:
        """
        Delete an account.

        Raises:
            AccountNotFoundError: No row was affected.
        """
        stmt = (
            delete(Account)
            .where(Account.id == account_id)
            .execution_options(synchronize_session=False)
        )
        async with self._session_factory() as session, session.begin():
            result = await session.execute(stmt)
            if result.rowcount == 0:
                raise AccountNotFoundError
        logger.debug("account_deleted account_id=%s", account_id)

    async def get_by_id(self, account_id: UUID) -> AccountRecord:
        """
        Fetch an account by id. The password hash is never loaded into the record.

        Raises:
            AccountNotFoundError: No account has this id.
        """
        async with self._session_factory() as session:
            result = await session.execute(select(Account).where(Account.id == account_id))
            row = result.scalar_one_or_none()
            if row is None:
                raise AccountNotFoundError
            return _to_record(row, include_password=False)

    async def find_by_email(self, email: str) -> AccountRecord | None:
        """
        Look up an account by email for authentication.

        Unlike get_by_id, the returned record includes the password hash.
        """
        async with self._session_factory() as session:
            result = await session.execute(select(Account).where(Account.email == email))
            row = result.scalar_one_or_none()
            if row is None:
                return None
            return _to_record(row, include_password=True)
