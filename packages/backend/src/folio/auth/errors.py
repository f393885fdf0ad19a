"""Auth error taxonomy.

Learn: Every failure the auth core can report is one of these classes.
Each carries the HTTP status it maps to, and main.py installs a single
exception handler that turns any AuthError into
``{"error": <message>}`` with that status. Routes raise; they never
build error responses themselves.

    AuthError
    ├── ConfigError              500  (fatal at startup in production)
    ├── NoTokenError             401
    ├── TokenError               401
    │   ├── InvalidSignatureError
    │   ├── TokenExpiredError
    │   ├── TokenNotYetValidError
    │   └── MalformedPayloadError
    ├── InvalidCredentialsError  401
    ├── ForbiddenError           403
    ├── AlreadyExistsError       403
    └── NotFoundError            404
"""

from typing import Optional


class AuthError(Exception):
    """Base class for all auth failures surfaced to HTTP callers."""

    status_code: int = 500
    default_message: str = "Authentication error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigError(AuthError):
    """JWT signing configuration is missing or unusable."""

    status_code = 500
    default_message = "JWT_SECRET environment variable is required"


class NoTokenError(AuthError):
    status_code = 401
    default_message = "No token provided"


class TokenError(AuthError):
    """Raised when a bearer token cannot be accepted."""

    status_code = 401
    default_message = "Invalid token"


class InvalidSignatureError(TokenError):
    default_message = "Invalid token"


class TokenExpiredError(TokenError):
    default_message = "Token expired"


class TokenNotYetValidError(TokenError):
    default_message = "Token not active"


class MalformedPayloadError(TokenError):
    default_message = "Invalid token payload structure"


class InvalidCredentialsError(AuthError):
    # Same message for unknown email and wrong password (no enumeration)
    status_code = 401
    default_message = "Invalid credentials"


class ForbiddenError(AuthError):
    status_code = 403
    default_message = "Admin access required"


class AlreadyExistsError(AuthError):
    status_code = 403
    default_message = "Admin user already exists"


class NotFoundError(AuthError):
    status_code = 404
    default_message = "User not found"
