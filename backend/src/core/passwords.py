"""Password hashing and verification with bcrypt."""
import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt ignores (or, in recent releases, rejects) input past this many bytes.
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHashingError(Exception):
    """Raised when the hashing library fails to produce a hash."""


def hash_password(plaintext: str) -> str:
    """
    Hash a plaintext password with a fresh random salt.

    The salt is embedded in the returned hash, so hashing the same plaintext
    twice yields two different strings that both verify.

    Raises:
        PasswordHashingError: If bcrypt rejects the input or fails internally.
    """
    try:
        hashed = bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt())
    except (ValueError, TypeError) as e:
        raise PasswordHashingError("Could not hash password") from e
    return hashed.decode("utf-8")


def verify_password(password_hash: str | None, plaintext: str) -> bool:
    """
    Check a plaintext password against a stored bcrypt hash.

    Uses bcrypt's constant-time comparison. A missing or malformed stored hash
    counts as a mismatch rather than an error.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("password_verify_rejected_input")
        return False


# Built at import so the first unknown-email login costs one bcrypt run, not two
DECOY_HASH = hash_password(secrets.token_urlsafe(16))


def verify_against_decoy(plaintext: str) -> bool:
    """
    Run a full bcrypt check against a throwaway hash. Always False.

    Used when no account matches a login email so that the miss costs as much
    time as a wrong password.
    """
    verify_password(DECOY_HASH, plaintext)
    return False
