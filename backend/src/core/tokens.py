"""Issue and validate the HMAC-signed JWT bearer tokens handed out at login."""
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt

ISSUE_ALGORITHM = "HS256"
# Only the HMAC family is accepted. Anything else, including "none" and the
# asymmetric algorithms, is rejected before the signature is looked at.
ALLOWED_ALGORITHMS = ["HS256", "HS384", "HS512"]
DEFAULT_EXPIRE_MINUTES = 60


class TokenError(Exception):
    """Base class for bearer token validation failures."""


class MalformedTokenError(TokenError):
    """Token could not be parsed or lacks required claims."""


class SignatureMismatchError(TokenError):
    """Token signature does not match the configured secret."""


class UnsupportedAlgorithmError(TokenError):
    """Token header names an algorithm outside the HMAC family."""


class TokenExpiredError(TokenError):
    """Token expiration instant is in the past."""


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a validated bearer token."""

    account_id: UUID
    email: str
    expires_at: datetime


def issue_token(
    account_id: UUID,
    email: str,
    secret: str,
    expires_minutes: int = DEFAULT_EXPIRE_MINUTES,
) -> str:
    """Sign a token for the given account that expires ``expires_minutes`` from now."""
    now = datetime.now(UTC)
    payload = {
        "id": str(account_id),
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm=ISSUE_ALGORITHM)


def decode_token(token: str, secret: str) -> TokenClaims:
    """
    Validate a bearer token and return its claims.

    Raises:
        UnsupportedAlgorithmError: Header algorithm is not HMAC.
        SignatureMismatchError: Signed with a different secret.
        TokenExpiredError: ``exp`` is in the past.
        MalformedTokenError: Anything else wrong with the token.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=ALLOWED_ALGORITHMS,
            options={"require": ["exp", "id", "email"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except jwt.InvalidAlgorithmError as e:
        raise UnsupportedAlgorithmError("Token algorithm not allowed") from e
    except jwt.InvalidSignatureError as e:
        raise SignatureMismatchError("Token signature mismatch") from e
    except jwt.PyJWTError as e:
        raise MalformedTokenError("Malformed token") from e

    try:
        account_id = UUID(str(payload["id"]))
    except ValueError as e:
        raise MalformedTokenError("Malformed token") from e

    email = payload["email"]
    if not isinstance(email, str):
        raise MalformedTokenError("Malformed token")

    return TokenClaims(
        account_id=account_id,
        email=email,
        expires_at=datetime.fromtimestamp(payload["exp"], UTC),
    )
