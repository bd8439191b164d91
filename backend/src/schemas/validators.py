"""
Explicit validation and normalization for account input.

Each ``validate_*`` function returns a list of field-level violations (empty when
the input is acceptable) instead of raising, so callers can report every problem
at once. ``normalize_*`` functions trim strings and apply defaults; they run
before validation.
"""
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from core.passwords import BCRYPT_MAX_PASSWORD_BYTES
from schemas.account import AccountCreate, AccountUpdate, LoginRequest

DEFAULT_ROLE = "user"
MAX_EMAIL_LENGTH = 60
MIN_PASSWORD_LENGTH = 6

# Upper bounds for free-text profile fields (column sizes in models/account.py)
PROFILE_FIELD_LIMITS: dict[str, int] = {
    "first_name": 32,
    "last_name": 32,
    "role": 10,
    "about": 1024,
    "phone_number": 20,
    "address": 250,
    "city": 24,
    "gender": 10,
}


@dataclass(frozen=True)
class FieldViolation:
    """A single rejected input field."""

    field: str
    message: str


def _strip(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip()


def _check_email(email: str | None, *, required: bool) -> list[FieldViolation]:
    if not email:
        if required:
            return [FieldViolation("email", "Email is required")]
        return []
    if len(email) > MAX_EMAIL_LENGTH:
        return [
            FieldViolation("email", f"Email must be at most {MAX_EMAIL_LENGTH} characters"),
        ]
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return [FieldViolation("email", "Email is not a valid address")]
    return []


def _check_password(password: str | None) -> list[FieldViolation]:
    if not password:
        return [FieldViolation("password", "Password is required")]
    if len(password) < MIN_PASSWORD_LENGTH:
        return [
            FieldViolation(
                "password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            ),
        ]
    if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        return [
            FieldViolation(
                "password", f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes",
            ),
        ]
    return []


def _check_profile(data: AccountCreate | AccountUpdate) -> list[FieldViolation]:
    violations = []
    for field, limit in PROFILE_FIELD_LIMITS.items():
        value = getattr(data, field)
        if value and len(value) > limit:
            violations.append(
                FieldViolation(field, f"{field} must be at most {limit} characters"),
            )
    if data.postcode is not None and data.postcode < 0:
        violations.append(FieldViolation("postcode", "postcode must not be negative"))
    return violations


def normalize_account_create(data: AccountCreate) -> AccountCreate:
    """Trim text fields, lowercase email and role, default the role to 'user'."""
    email = _strip(data.email)
    role = _strip(data.role)
    return data.model_copy(
        update={
            "first_name": _strip(data.first_name) or "",
            "last_name": _strip(data.last_name) or "",
            "email": email.lower() if email else email,
            "role": role.lower() if role else DEFAULT_ROLE,
            "about": _strip(data.about),
            "phone_number": _strip(data.phone_number),
            "address": _strip(data.address),
            "city": _strip(data.city),
            "gender": _strip(data.gender),
        },
    )


def normalize_account_update(data: AccountUpdate) -> AccountUpdate:
    """Trim text fields and lowercase email and role. Blank values stay blank."""
    email = _strip(data.email)
    role = _strip(data.role)
    return data.model_copy(
        update={
            "first_name": _strip(data.first_name),
            "last_name": _strip(data.last_name),
            "email": email.lower() if email else email,
            "role": role.lower() if role else role,
            "about": _strip(data.about),
            "phone_number": _strip(data.phone_number),
            "address": _strip(data.address),
            "city": _strip(data.city),
            "gender": _strip(data.gender),
        },
    )


def normalize_email(email: str | None) -> str:
    """Normalize an email for lookups the same way registration stores it."""
    return (email or "").strip().lower()


def validate_account_create(data: AccountCreate) -> list[FieldViolation]:
    """Validate a (normalized) registration payload."""
    return [
        *_check_email(data.email, required=True),
        *_check_password(data.password),
        *_check_profile(data),
    ]


def validate_account_update(data: AccountUpdate) -> list[FieldViolation]:
    """Validate a (normalized) partial update payload."""
    return [
        *_check_email(data.email, required=False),
        *_check_profile(data),
    ]


def validate_login(data: LoginRequest) -> list[FieldViolation]:
    """Validate login credentials for shape only (not correctness)."""
    return [
        *_check_email(normalize_email(data.email), required=True),
        *_check_password(data.password),
    ]
