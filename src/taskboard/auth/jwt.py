"""JWT identity token creation and verification.

A token asserts "subject = this user's email, valid until exp". Nothing
is stored server-side: every request re-checks signature and expiry.

The signing key is read from settings once and injected into a
TokenIssuer; nothing mutates it afterwards.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt

from taskboard.config import settings
from taskboard.errors import InvalidTokenError


class TokenIssuer:
    """Issues and verifies HS256 tokens for a fixed secret and window."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, subject_email: str, now: Optional[datetime] = None) -> str:
        """Create a signed token for the given email."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": subject_email,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Return the subject email of a valid token.

        Raises InvalidTokenError for a bad signature, a malformed token or
        an expired one. The message is the same in every case.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.PyJWTError:
            raise InvalidTokenError()

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError()
        return subject


@lru_cache(maxsize=1)
def get_token_issuer() -> TokenIssuer:
    """Process-wide issuer built from settings (also a FastAPI dependency)."""
    return TokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.access_token_expire_minutes,
    )
