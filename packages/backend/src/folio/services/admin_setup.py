"""Admin bootstrap: create (or, when forced, overwrite) the admin account.

Learn: Shared by the `folio setup` CLI and POST /admin/setup.

The default is no-clobber: if an identity with this email already
exists and force is False, nothing is written and success=False comes
back. The HTTP route adds its own, stronger guard (no admin may exist
at all) before calling in with force=True; the CLI trusts the operator
and skips that guard.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from folio.auth.password import hash_password
from folio.db.models import ADMIN_ROLE, User
from folio.services.identity_store import IdentityStore, normalize_email

logger = structlog.get_logger()


@dataclass
class SetupResult:
    success: bool
    message: str
    identity: Optional[User] = None


async def setup_admin(
    store: IdentityStore,
    email: str,
    password: str,
    force: bool = False,
) -> SetupResult:
    """Create or update the admin identity for ``email``."""
    email = normalize_email(email)
    logger.info("admin.setup_started", email=email, force=force)

    existing = await store.find_by_email(email)
    if existing is not None and not force:
        logger.warning("admin.setup_skipped", email=email, reason="already_exists")
        return SetupResult(
            success=False,
            message="Admin user already exists. Use force=true to update.",
            identity=existing,
        )

    admin = await store.upsert_by_email(
        email=email,
        password_hash=hash_password(password),
        role=ADMIN_ROLE,
    )
    logger.info(
        "admin.setup_completed",
        user_id=str(admin.id),
        email=admin.email,
        updated=existing is not None,
    )
    return SetupResult(
        success=True,
        message="Admin user created/updated successfully",
        identity=admin,
    )
