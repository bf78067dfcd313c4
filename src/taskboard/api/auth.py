"""Auth API — registration, login, current user.

- POST /auth/register → create account, returns {token, username}
- POST /auth/login    → email/password → {token, username}
- GET  /auth/me       → the user the bearer token resolves to
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth.dependencies import CurrentIdentity, get_current_user
from taskboard.auth.jwt import TokenIssuer, get_token_issuer
from taskboard.db.engine import get_db
from taskboard.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserRead
from taskboard.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def _auth_svc(
    db: AsyncSession = Depends(get_db),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(db, tokens)


@router.post("/register", response_model=AuthResponse)
async def register(body: RegisterRequest, svc: AuthService = Depends(_auth_svc)):
    """Create a new account and log it in."""
    result = await svc.register(body.name, body.email, body.password)
    return AuthResponse(token=result.token, username=result.display_name)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(_auth_svc)):
    """Exchange email + password for a token."""
    result = await svc.login(body.email, body.password)
    return AuthResponse(token=result.token, username=result.display_name)


@router.get("/me", response_model=UserRead)
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    return UserRead(id=identity.user_id, email=identity.email, name=identity.name)
