"""FastAPI auth dependencies.

Used as Depends() in route handlers (or on whole routers) to turn the
bearer token on a request into the acting user. Anything wrong with the
token fails closed: the request is rejected with 401 before any handler
code runs.
"""

import uuid
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.jwt import TokenIssuer, get_token_issuer
from taskboard.db.engine import get_db
from taskboard.errors import InvalidTokenError, UserNotFoundError
from taskboard.services.auth_service import get_user_by_email


class CurrentIdentity:
    """The authenticated user making the request.

    All downstream code identifies the actor by email, the same value
    stored as the token subject and compared by the ownership guard.
    """

    def __init__(self, user_id: uuid.UUID, email: str, name: str):
        self.user_id = user_id
        self.email = email
        self.name = name

    def __repr__(self) -> str:
        return f"CurrentIdentity(email={self.email!r})"


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an `Authorization: Bearer <token>` header."""
    if not authorization:
        raise InvalidTokenError("Authentication required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidTokenError("Authentication required")
    return token.strip()


async def resolve_identity(
    token: str, db: AsyncSession, tokens: TokenIssuer
) -> CurrentIdentity:
    """Verify the token and load the user it names.

    Raises InvalidTokenError for any token problem and UserNotFoundError
    when the subject no longer matches an active account.
    """
    email = tokens.verify(token)
    user = await get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError()
    return CurrentIdentity(user_id=user.id, email=user.email, name=user.name)


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> CurrentIdentity:
    """Resolve the acting user (required, 401 if no valid token)."""
    token = extract_bearer_token(authorization)
    return await resolve_identity(token, db, tokens)
