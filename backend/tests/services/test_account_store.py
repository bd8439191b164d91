"""Tests for the account store against an in-memory SQLite database."""
from datetime import date
from uuid import uuid4

import pytest

from schemas.account import AccountUpdate
from services.account_store import AccountStore, coalesce_changes
from services.exceptions import AccountNotFoundError, EmailAlreadyExistsError
from tests.conftest import make_account_create

HASH = "$2b$12$C6UzMDM.H6dfI/f/IKxGhuDJ0sfNUr4W1Uv3qz6A1W3M6vRs8dVyW"


class TestCreate:
    """Tests for AccountStore.create."""

    async def test__returns_row_with_hash_and_defaults(
        self, account_store: AccountStore,
    ) -> None:
        record = await account_store.create(make_account_create(), HASH)

        assert record.id is not None
        assert record.email == "ada@example.com"
        assert record.password == HASH
        assert record.role == "user"
        assert record.created_at is not None
        assert record.updated_at is not None
        assert record.login_date is not None

    async def test__missing_names_default_to_empty(
        self, account_store: AccountStore,
    ) -> None:
        record = await account_store.create(
            make_account_create(first_name=None, last_name=None), HASH,
        )

        assert record.first_name == ""
        assert record.last_name == ""

    async def test__stores_profile_fields(self, account_store: AccountStore) -> None:
        record = await account_store.create(
            make_account_create(city="London", postcode=12345, birthday=date(1815, 12, 10)),
            HASH,
        )

        assert record.city == "London"
        assert record.postcode == 12345
        assert record.birthday == date(1815, 12, 10)

    async def test__duplicate_email__conflict(self, account_store: AccountStore) -> None:
        await account_store.create(make_account_create(), HASH)

        with pytest.raises(EmailAlreadyExistsError):
            await account_store.create(make_account_create(first_name="Other"), HASH)

    async def test__identifiers_are_unique(self, account_store: AccountStore) -> None:
        first = await account_store.create(make_account_create(email="a@x.com"), HASH)
        second = await account_store.create(make_account_create(email="b@x.com"), HASH)

        assert first.id != second.id


class TestReads:
    """Tests for get_by_id and find_by_email."""

    async def test__get_by_id__omits_password(self, account_store: AccountStore) -> None:
        created = await account_store.create(make_account_create(), HASH)

        record = await account_store.get_by_id(created.id)

        assert record.id == created.id
        assert record.password is None

    async def test__get_by_id__missing__not_found(self, account_store: AccountStore) -> None:
        with pytest.raises(AccountNotFoundError):
            await account_store.get_by_id(uuid4())

    async def test__find_by_email__includes_password(
        self, account_store: AccountStore,
    ) -> None:
        created = await account_store.create(make_account_create(), HASH)

        record = await account_store.find_by_email("ada@example.com")

        assert record is not None
        assert record.id == created.id
        assert record.password == HASH

    async def test__find_by_email__missing__none(self, account_store: AccountStore) -> None:
        assert await account_store.find_by_email("nobody@example.com") is None


class TestUpdate:
    """Tests for update_by_id."""

    async def test__applies_only_non_empty_fields(self, account_store: AccountStore) -> None:
        created = await account_store.create(
            make_account_create(city="London", postcode=12345), HASH,
        )

        record = await account_store.update_by_id(
            created.id, AccountUpdate(first_name="Augusta", city="", postcode=0),
        )

        assert record.first_name == "Augusta"
        assert record.last_name == "Lovelace"
        assert record.city == "London"
        assert record.postcode == 12345
        assert record.password is None

    async def test__does_not_touch_password(self, account_store: AccountStore) -> None:
        created = await account_store.create(make_account_create(), HASH)

        await account_store.update_by_id(created.id, AccountUpdate(city="Paris"))

        stored = await account_store.find_by_email("ada@example.com")
        assert stored is not None
        assert stored.password == HASH

    async def test__updated_at_not_before_created_at(
        self, account_store: AccountStore,
    ) -> None:
        created = await account_store.create(make_account_create(), HASH)

        record = await account_store.update_by_id(created.id, AccountUpdate(city="Paris"))

        assert record.updated_at >= created.created_at

    async def test__missing__not_found(self, account_store: AccountStore) -> None:
        with pytest.raises(AccountNotFoundError):
            await account_store.update_by_id(uuid4(), AccountUpdate(city="Paris"))

    async def test__email_taken__conflict(self, account_store: AccountStore) -> None:
        await account_store.create(make_account_create(email="a@x.com"), HASH)
        other = await account_store.create(make_account_create(email="b@x.com"), HASH)

        with pytest.raises(EmailAlreadyExistsError):
            await account_store.update_by_id(other.id, AccountUpdate(email="a@x.com"))


class TestDelete:
    """Tests for delete_by_id."""

    async def test__removes_row(self, account_store: AccountStore) -> None:
        created = await account_store.create(make_account_create(), HASH)

        await account_store.delete_by_id(created.id)

        with pytest.raises(AccountNotFoundError):
            await account_store.get_by_id(created.id)

    async def test__missing__not_found(self, account_store: AccountStore) -> None:
        with pytest.raises(AccountNotFoundError):
            await account_store.delete_by_id(uuid4())


class TestCoalesceChanges:
    """Empty, zero and missing values mean unchanged."""

    def test__drops_unchanged_values(self) -> None:
        changes = coalesce_changes(
            AccountUpdate(first_name="", city="Paris", postcode=0, about=None),
        )

        assert changes == {"city": "Paris"}

    def test__empty_update__no_changes(self) -> None:
        assert coalesce_changes(AccountUpdate()) == {}
