"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The
token carries the identity claims {id, email, role} and, unless the
configured lifetime is "never", an ``exp`` claim.

Nothing in this module reads the environment. Callers hand in a
JWTConfig (built once at startup by folio.auth.config), which keeps
the codec testable with any secret.

Expiry policy (JWT_EXPIRES_IN):
- None / "" / "never"        → no exp claim
- int > 0                    → that many seconds
- "3600", "3600s", "15m", "24h", "7d" (case-insensitive)
- anything else, or ≤ 0      → no exp claim (silently; the startup
                               validator warns about it instead)
- a lifetime whose expiry date is past datetime.max → no exp claim,
  and the validator warns
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from folio.auth.errors import (
    InvalidSignatureError,
    MalformedPayloadError,
    TokenExpiredError,
    TokenNotYetValidError,
)

ExpiresIn = Union[str, int, None]

_DURATION_RE = re.compile(r"^(\d{1,18})([smhd])?$", re.IGNORECASE)
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


@dataclass(frozen=True)
class JWTConfig:
    """Signing configuration, constructed once per process."""

    secret: str = field(repr=False)
    expires_in: ExpiresIn = None
    algorithm: str = "HS256"


class IdentityClaims(BaseModel):
    """The identity embedded in a token.

    Learn: strict=True means no coercion: an integer ``id`` or a
    missing ``role`` fails validation instead of being patched up.
    Registered claims (exp, iat) are ignored here.
    """

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    id: str = Field(min_length=1)
    email: str = Field(min_length=1)
    role: str = Field(min_length=1)


def _policy_seconds(expires_in: ExpiresIn) -> Optional[int]:
    """Seconds named by the policy, 0 for "never", None if unrecognised."""
    if expires_in is None:
        return 0
    if isinstance(expires_in, int):
        return expires_in
    value = expires_in.strip()
    if not value or value.lower() == "never":
        return 0
    match = _DURATION_RE.match(value)
    if not match:
        return None
    unit = (match.group(2) or "s").lower()
    return int(match.group(1)) * _UNIT_SECONDS[unit]


def _lifetime(seconds: int) -> Optional[timedelta]:
    # None when a token issued now could not carry the resulting exp
    if seconds <= 0:
        return None
    try:
        lifetime = timedelta(seconds=seconds)
        datetime.now(timezone.utc) + lifetime
    except OverflowError:
        return None
    return lifetime


def is_valid_expiry(expires_in: ExpiresIn) -> bool:
    """True if expires_in is a recognised policy (including "never")."""
    seconds = _policy_seconds(expires_in)
    if seconds is None:
        return False
    return seconds <= 0 or _lifetime(seconds) is not None


def parse_expiry(expires_in: ExpiresIn) -> Optional[timedelta]:
    """Turn an expiry policy into a token lifetime, or None for no expiry."""
    seconds = _policy_seconds(expires_in)
    if seconds is None:
        return None
    return _lifetime(seconds)


def encode_token(
    claims: IdentityClaims,
    config: JWTConfig,
    now: Optional[datetime] = None,
) -> str:
    """Create a signed token for the given identity.

    ``now`` defaults to the current UTC time; tests pass an earlier
    instant to produce tokens that are already partway through (or
    past) their lifetime.
    """
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "id": claims.id,
        "email": claims.email,
        "role": claims.role,
        "iat": issued_at,
    }
    lifetime = parse_expiry(config.expires_in)
    if lifetime is not None:
        try:
            payload["exp"] = issued_at + lifetime
        except OverflowError:
            # issued_at too close to datetime.max; treated as no expiry
            pass
    return jwt.encode(payload, config.secret, algorithm=config.algorithm)


def decode_token(token: str, config: JWTConfig) -> IdentityClaims:
    """Verify and decode a token.

    Raises TokenExpiredError, TokenNotYetValidError, InvalidSignatureError
    (bad signature or not a JWT at all) or MalformedPayloadError (signature
    fine, claims not {id, email, role} as non-empty strings).
    """
    try:
        payload = jwt.decode(token, config.secret, algorithms=[config.algorithm])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except jwt.ImmatureSignatureError:
        raise TokenNotYetValidError()
    except jwt.InvalidTokenError:
        raise InvalidSignatureError()

    try:
        return IdentityClaims.model_validate(payload)
    except ValidationError:
        raise MalformedPayloadError()
