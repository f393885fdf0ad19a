"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to gate a request.

    request → no/empty Bearer token          → 401 "No token provided"
            → token fails to decode          → 401 with the codec's reason
                                               ("Token expired", "Invalid token", ...)
            → valid token, role != "admin"   → 403 (require_admin only)
            → handler

require_admin depends on authenticate, so it can't be used on its own.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from folio.auth.errors import ConfigError, ForbiddenError, NoTokenError, TokenError
from folio.auth.jwt import IdentityClaims, JWTConfig, decode_token
from folio.db.models import ADMIN_ROLE

logger = structlog.get_logger()

_BEARER_PREFIX = "Bearer "


def get_jwt_config(request: Request) -> JWTConfig:
    """Return the signing config built at startup.

    Raises ConfigError (500) when the app started in degraded mode
    because JWT_SECRET was missing or too short.
    """
    config = getattr(request.app.state, "jwt_config", None)
    if config is None:
        raise ConfigError(getattr(request.app.state, "jwt_config_error", None))
    return config


async def authenticate(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> IdentityClaims:
    """Require a valid Bearer token and attach its identity to the request."""
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise NoTokenError()
    token = authorization[len(_BEARER_PREFIX):].strip()
    if not token:
        raise NoTokenError()

    config = get_jwt_config(request)
    try:
        identity = decode_token(token, config)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=e.message, path=request.url.path)
        raise

    request.state.identity = identity
    return identity


async def require_admin(
    identity: IdentityClaims = Depends(authenticate),
) -> IdentityClaims:
    """Require an authenticated identity with role "admin"."""
    if identity.role != ADMIN_ROLE:
        raise ForbiddenError()
    return identity
