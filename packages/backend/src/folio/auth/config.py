"""Startup validation of the JWT signing configuration.

Learn: Runs once, when the app (or the CLI) is built. A missing or
short JWT_SECRET raises ConfigError; what happens next depends on the
posture: create_app() re-raises in production and only logs in
development. Weak-looking secrets and unparseable JWT_EXPIRES_IN values
are warnings, never errors.
"""

import re
import secrets
from typing import Optional

import structlog

from folio.auth.errors import ConfigError
from folio.auth.jwt import ExpiresIn, JWTConfig, is_valid_expiry
from folio.config import Settings

logger = structlog.get_logger()

MIN_SECRET_LENGTH = 32
MIN_SECRET_BYTES = 32
DEFAULT_SECRET_BYTES = 64

_GENERATE_HINT = 'Run "folio generate-secret" to generate a secure secret.'

_WEAK_SECRET_PATTERNS = [
    re.compile(r"^password", re.IGNORECASE),
    re.compile(r"^secret", re.IGNORECASE),
    re.compile(r"^jwt", re.IGNORECASE),
    re.compile(r"^token", re.IGNORECASE),
    re.compile(r"^key$", re.IGNORECASE),
    re.compile(r"^123"),
    re.compile(r"^admin", re.IGNORECASE),
]


def validate_jwt_settings(secret: Optional[str], expires_in: ExpiresIn) -> list[str]:
    """Validate the signing secret and expiry policy.

    Returns a list of warnings (possibly empty). Raises ConfigError when
    the secret is missing or shorter than MIN_SECRET_LENGTH.
    """
    if not secret or not secret.strip():
        raise ConfigError(
            "JWT_SECRET environment variable is required. "
            "Please set it in your environment variables. " + _GENERATE_HINT
        )
    if len(secret) < MIN_SECRET_LENGTH:
        raise ConfigError(
            f"JWT_SECRET is too short ({len(secret)} characters). "
            f"It must be at least {MIN_SECRET_LENGTH} characters long for security. "
            + _GENERATE_HINT
        )

    warnings: list[str] = []
    if any(pattern.search(secret) for pattern in _WEAK_SECRET_PATTERNS):
        warnings.append(
            "JWT_SECRET appears to be weak. "
            "Consider using a cryptographically random secret. " + _GENERATE_HINT
        )
    if not is_valid_expiry(expires_in):
        warnings.append(
            f'JWT_EXPIRES_IN format "{expires_in}" may be invalid. '
            'Expected format: number (seconds) or string like "7d", "24h", "3600s". '
            'Use "never" for no expiration.'
        )
    return warnings


def load_jwt_config(settings: Settings) -> JWTConfig:
    """Validate settings and build the process-wide JWTConfig."""
    warnings = validate_jwt_settings(settings.jwt_secret, settings.jwt_expires_in)
    for warning in warnings:
        logger.warning("auth.config_warning", message=warning)
    return JWTConfig(
        secret=settings.jwt_secret,
        expires_in=settings.jwt_expires_in,
        algorithm=settings.jwt_algorithm,
    )


def generate_secret(num_bytes: int = DEFAULT_SECRET_BYTES) -> str:
    """Return a random hex secret suitable for JWT_SECRET."""
    if num_bytes < MIN_SECRET_BYTES:
        raise ValueError(f"Secret length must be at least {MIN_SECRET_BYTES} bytes")
    return secrets.token_hex(num_bytes)
