"""Auth service — registration and login.

Each call is independent: no state is shared between requests, so
concurrent registrations/logins for different users need no locking.

Registration:  email taken? → hash password → insert user → issue token
Login:         look up user → verify password → issue token

The "email taken?" check is a courtesy; two racing registrations can both
pass it. The unique constraint on users.email rejects the loser at commit
and we surface that as the same DuplicateEmailError.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.jwt import TokenIssuer
from taskboard.auth.password import burn_verification, hash_password, verify_password
from taskboard.db.models import User
from taskboard.errors import DuplicateEmailError, InvalidCredentialsError, UserNotFoundError

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthResult:
    token: str
    display_name: str


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Active user with this exact email, or None."""
    result = await db.execute(
        select(User).where(User.email == email, User.deleted.is_(False))
    )
    return result.scalars().first()


class AuthService:
    """Business logic for account creation and credential checks."""

    def __init__(self, db: AsyncSession, tokens: TokenIssuer):
        self.db = db
        self.tokens = tokens

    async def _email_exists(self, email: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.email == email))
        return result.first() is not None

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        if await self._email_exists(email):
            logger.info("auth.register_rejected", email=email, reason="duplicate_email")
            raise DuplicateEmailError()

        user = User(name=name, email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("auth.register_rejected", email=email, reason="duplicate_email_race")
            raise DuplicateEmailError()

        logger.info("auth.registered", user_id=str(user.id), email=email)
        return AuthResult(token=self.tokens.issue(user.email), display_name=user.name)

    async def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and issue a token.

        Unknown email and wrong password raise different errors (callers
        see 404 vs 401), but both paths pay for one bcrypt comparison.
        """
        user = await get_user_by_email(self.db, email)
        if user is None:
            burn_verification(password)
            logger.info("auth.login_failed", email=email, reason="unknown_email")
            raise UserNotFoundError()

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", email=email, reason="bad_password")
            raise InvalidCredentialsError()

        logger.info("auth.login", user_id=str(user.id))
        return AuthResult(token=self.tokens.issue(user.email), display_name=user.name)
