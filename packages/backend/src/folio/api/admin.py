"""Admin API: first-run setup, password reset, status, info.

Learn: POST /admin/setup is the only route that mutates state without a
token. It is guarded by "no admin exists yet", checked across all
identities, not just the submitted email, so an anonymous caller can
never reset an existing admin through it.

The check and the write are two statements, so two setup requests
racing on an empty database could both pass the check. Accepted for a
single-operator site; the upsert keeps the outcome to at most one row
per email.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from folio.auth.dependencies import require_admin
from folio.auth.errors import AlreadyExistsError, AuthError, NotFoundError
from folio.auth.jwt import IdentityClaims
from folio.auth.password import hash_password
from folio.db.engine import get_db
from folio.db.models import ADMIN_ROLE
from folio.schemas.auth import (
    AdminDetail,
    AdminInfo,
    AdminStatus,
    MessageResponse,
    ResetPasswordRequest,
    SetupRequest,
    SetupResponse,
    UserRead,
)
from folio.services.admin_setup import setup_admin
from folio.services.identity_store import IdentityStore

logger = structlog.get_logger()

router = APIRouter(prefix="/admin")


def _store(db: AsyncSession = Depends(get_db)) -> IdentityStore:
    return IdentityStore(db)


@router.post("/setup", response_model=SetupResponse, status_code=201)
async def setup(body: SetupRequest, store: IdentityStore = Depends(_store)):
    """Create the first admin. Refused once any admin exists."""
    if await store.find_first_by_role(ADMIN_ROLE) is not None:
        logger.warning("admin.setup_refused", email=body.email)
        raise AlreadyExistsError(
            "Admin user already exists. "
            "Use /admin/reset-password to change password."
        )

    result = await setup_admin(store, body.email, body.password, force=True)
    if not result.success:
        raise AuthError(result.message)

    return SetupResponse(
        message="Admin user created successfully",
        user=UserRead.from_user(result.identity),
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    identity: IdentityClaims = Depends(require_admin),
    store: IdentityStore = Depends(_store),
):
    """Set a new password for the calling admin (no current-password check)."""
    await store.update_password(identity.id, hash_password(body.new_password))
    logger.info("admin.password_reset", user_id=identity.id)
    return MessageResponse(message="Password updated successfully")


@router.get("/status", response_model=AdminStatus)
async def status(store: IdentityStore = Depends(_store)):
    """Public, read-only: does the site still need its first admin?"""
    admin_count = await store.count_by_role(ADMIN_ROLE)
    return AdminStatus(
        admin_exists=admin_count > 0,
        admin_count=admin_count,
        setup_required=admin_count == 0,
    )


@router.get("/info", response_model=AdminInfo)
async def info(
    identity: IdentityClaims = Depends(require_admin),
    store: IdentityStore = Depends(_store),
):
    user = await store.find_by_id(identity.id)
    if user is None:
        raise NotFoundError()
    return AdminInfo(user=AdminDetail.from_user(user))
