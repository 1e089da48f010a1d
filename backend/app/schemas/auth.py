"""Auth & profile request/response schemas."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.config import settings
from app.core.rbac import RoleType

NAME_PATTERN = re.compile(r"^[A-Za-zÁÉÍÓÚáéíóúÑñÜü\s]+$")
PHONE_PATTERN = re.compile(r"^\+51\s?9\d{8}$")


def check_password_strength(value: str) -> str:
    """At least 8 visible characters (whitespace ignored) and one digit."""
    visible = re.sub(r"\s", "", value)
    if len(visible) < 8:
        raise ValueError("Password must have at least 8 characters, not counting spaces")
    if not re.search(r"\d", visible):
        raise ValueError("Password must include at least one number")
    return value


def check_person_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Name must have at least 2 characters")
    if not NAME_PATTERN.match(value):
        raise ValueError("Name may only contain letters and spaces")
    return value


# ── Address ────────────────────────────────────────
class Address(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    label: str | None = Field(None, max_length=100)
    street: str | None = Field(None, max_length=255)
    department: str | None = Field(None, max_length=100)
    province: str | None = Field(None, max_length=100)
    district: str | None = Field(None, max_length=100)
    is_primary: bool = Field(default=False, alias="isPrimary")


# ── Register / Login ───────────────────────────────
class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return check_person_name(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        domain = v.rsplit("@", 1)[-1]
        allowed = [d.lower() for d in settings.ALLOWED_EMAIL_DOMAINS]
        if allowed and domain not in allowed:
            raise ValueError(f"Email must end in one of: {', '.join('@' + d for d in allowed)}")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


# ── Profile ────────────────────────────────────────
class UserResponse(BaseModel):
    """Public view of a user. Never carries the password hash or refresh tokens."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: RoleType
    country: str
    phone: str | None = None
    google_id: str | None = Field(None, serialization_alias="googleId")
    addresses: list[Address] = []
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str = Field(serialization_alias="accessToken")


class AccessTokenResponse(BaseModel):
    access_token: str = Field(serialization_alias="accessToken")


class MeResponse(BaseModel):
    user: UserResponse | None


class ProfileUpdate(BaseModel):
    name: str | None = None
    country: str | None = Field(None, max_length=100)
    phone: str | None = None
    addresses: list[Address] | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return None if v is None else check_person_name(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str | None) -> str | None:
        if not v:
            return None
        v = v.strip()
        if not PHONE_PATTERN.match(v):
            raise ValueError("Invalid phone. It must start with +51 and have 9 digits")
        return v

    @field_validator("addresses")
    @classmethod
    def _one_primary(cls, v: list[Address] | None) -> list[Address] | None:
        if v is not None and sum(1 for a in v if a.is_primary) > 1:
            raise ValueError("Only one address can be marked as primary")
        return v


class ProfileResponse(BaseModel):
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(min_length=1, alias="currentPassword")
    new_password: str = Field(alias="newPassword")

    @field_validator("new_password")
    @classmethod
    def _new_password(cls, v: str) -> str:
        return check_password_strength(v)


class MessageResponse(BaseModel):
    message: str
