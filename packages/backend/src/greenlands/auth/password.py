"""Password hashing utilities.

Uses bcrypt for password hashing. bcrypt automatically handles salting;
the work factor comes from settings (12 in production, lower in tests).
"""

import bcrypt

from greenlands.config import settings


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    bcrypt includes a random salt automatically and produces hashes
    starting with "$2b$". Passwords are truncated to 72 bytes (bcrypt's
    limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


# Checked against when the email is unknown so a failed login costs the
# same whether or not the account exists.
_DUMMY_HASH = bcrypt.hashpw(
    b"greenlands-dummy-password", bcrypt.gensalt(rounds=settings.bcrypt_rounds)
)


def burn_verification(password: str) -> None:
    """Run a bcrypt check whose result is discarded."""
    bcrypt.checkpw(password.encode("utf-8")[:72], _DUMMY_HASH)
