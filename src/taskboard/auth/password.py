"""Password hashing utilities.

bcrypt handles salting itself and is deliberately slow, which is what
we want against offline brute force. The work factor comes from
settings (12 in production, lowered in tests). Passwords are truncated
to 72 bytes, bcrypt's limit.
"""

from functools import lru_cache
from typing import Optional

import bcrypt

from taskboard.config import settings


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a fresh random salt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("taskboard-timing-equalizer")


def burn_verification(password: str) -> None:
    """Spend one hash comparison without a real account.

    Used on the unknown-email login path so it costs the same as a
    wrong-password attempt.
    """
    verify_password(password, _dummy_hash())
