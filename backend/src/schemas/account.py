"""
Pydantic schemas for accounts.

Wire models here carry types only. Field constraints live in explicit validation
functions (schemas/validators.py) so that validation is not tied to
serialization.
"""
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AccountRecord(BaseModel):
    """
    Detached account record returned by the account store.

    This is the only account representation that leaves the store. The
    ``password`` field holds the bcrypt hash when the store loaded it (login
    lookups) and must be blanked with ``sanitize()`` before the record crosses
    the service boundary or is written to the cache.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str = ""
    last_name: str = ""
    email: str
    password: str | None = None
    role: str = "user"
    about: str | None = None
    phone_number: str | None = None
    address: str | None = None
    city: str | None = None
    gender: str | None = None
    postcode: int | None = None
    birthday: date | None = None
    created_at: datetime
    updated_at: datetime
    login_date: datetime

    def sanitize(self) -> "AccountRecord":
        """Blank the password hash in place. Safe to call more than once."""
        self.password = None
        return self


class AccountCreate(BaseModel):
    """Registration payload."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None
    about: str | None = None
    phone_number: str | None = None
    address: str | None = None
    city: str | None = None
    gender: str | None = None
    postcode: int | None = None
    birthday: date | None = None


class AccountUpdate(BaseModel):
    """
    Partial update payload.

    Empty or missing values mean "leave unchanged". Passwords cannot be changed
    through this payload.
    """

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    role: str | None = None
    about: str | None = None
    phone_number: str | None = None
    address: str | None = None
    city: str | None = None
    gender: str | None = None
    postcode: int | None = None
    birthday: date | None = None


class LoginRequest(BaseModel):
    """Login credentials."""

    email: str | None = None
    password: str | None = None


class AccountResponse(BaseModel):
    """Account as returned to API callers. Has no password field at all."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str
    last_name: str
    email: str
    role: str
    about: str | None
    phone_number: str | None
    address: str | None
    city: str | None
    gender: str | None
    postcode: int | None
    birthday: date | None
    created_at: datetime
    updated_at: datetime
    login_date: datetime


class AccountWithToken(BaseModel):
    """Result of registration and login."""

    user: AccountRecord
    token: str


class AccountWithTokenResponse(BaseModel):
    """Wire shape of registration and login: ``{"user": ..., "token": ...}``."""

    model_config = ConfigDict(from_attributes=True)

    user: AccountResponse
    token: str
