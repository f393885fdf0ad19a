"""Auth API: login, current identity, password change.

Learn: Routes for the admin's own session:
- POST /auth/login → email/password → JWT
- GET /auth/me → claims from the presented token
- POST /auth/change-password → admin only, re-verifies the current password

Failures are raised as AuthError subclasses; main.py turns them into
``{"error": ...}`` responses.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from folio.auth.dependencies import authenticate, get_jwt_config, require_admin
from folio.auth.errors import InvalidCredentialsError, NotFoundError
from folio.auth.jwt import IdentityClaims, JWTConfig, encode_token
from folio.auth.password import hash_password, verify_password
from folio.db.engine import get_db
from folio.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    UserRead,
)
from folio.services.identity_store import IdentityStore

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


def _store(db: AsyncSession = Depends(get_db)) -> IdentityStore:
    return IdentityStore(db)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    store: IdentityStore = Depends(_store),
    config: JWTConfig = Depends(get_jwt_config),
):
    """Login with email and password → JWT."""
    user = await store.find_by_email(body.email)

    # Unknown email and wrong password answer identically
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("auth.login_failed", email=body.email)
        raise InvalidCredentialsError()

    claims = IdentityClaims(id=str(user.id), email=user.email, role=user.role)
    token = encode_token(claims, config)
    logger.info("auth.login_succeeded", user_id=claims.id)

    return LoginResponse(token=token, user=UserRead.from_claims(claims))


# ─── Current identity ───────────────────────────────────


@router.get("/me", response_model=MeResponse)
async def get_me(identity: IdentityClaims = Depends(authenticate)):
    """Return the identity carried by the presented token."""
    return MeResponse(user=UserRead.from_claims(identity))


# ─── Change password ────────────────────────────────────


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    identity: IdentityClaims = Depends(require_admin),
    store: IdentityStore = Depends(_store),
):
    """Change the caller's password after re-checking the current one."""
    user = await store.find_by_id(identity.id)
    if user is None:
        raise NotFoundError()

    if not verify_password(body.current_password, user.password_hash):
        raise InvalidCredentialsError("Current password is incorrect")

    await store.update_password(user.id, hash_password(body.new_password))
    logger.info("auth.password_changed", user_id=identity.id)
    return MessageResponse(message="Password updated successfully")
