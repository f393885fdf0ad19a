"""Pydantic schemas for the auth and admin endpoints.

Learn: The admin UI speaks camelCase (currentPassword, adminExists, ...),
so those fields carry aliases. Emails are stripped and lower-cased on
the way in, matching how they are stored.
"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from folio.auth.jwt import IdentityClaims
from folio.db.models import User

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PASSWORD_MIN_LEN = 8


class _EmailBody(BaseModel):
    email: str = Field(..., max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not re.match(EMAIL_PATTERN, v):
            raise ValueError("Valid email required")
        return v


# ─── Requests ───────────────────────────────────────────

class LoginRequest(_EmailBody):
    password: str = Field(..., min_length=1)


class SetupRequest(_EmailBody):
    password: str = Field(..., min_length=PASSWORD_MIN_LEN)


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, alias="newPassword")


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, alias="newPassword")


# ─── Responses ──────────────────────────────────────────

class UserRead(BaseModel):
    id: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        return cls(id=str(user.id), email=user.email, role=user.role)

    @classmethod
    def from_claims(cls, claims: IdentityClaims) -> "UserRead":
        return cls(id=claims.id, email=claims.email, role=claims.role)


class LoginResponse(BaseModel):
    token: str
    user: UserRead


class MeResponse(BaseModel):
    user: UserRead


class MessageResponse(BaseModel):
    message: str


class SetupResponse(BaseModel):
    message: str
    user: UserRead


class AdminStatus(BaseModel):
    """Public setup check used by the admin UI's first-run screen."""

    model_config = ConfigDict(populate_by_name=True)

    admin_exists: bool = Field(alias="adminExists")
    admin_count: int = Field(alias="adminCount")
    setup_required: bool = Field(alias="setupRequired")


class AdminDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    role: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_user(cls, user: User) -> "AdminDetail":
        return cls(
            id=str(user.id),
            email=user.email,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AdminInfo(BaseModel):
    user: AdminDetail
