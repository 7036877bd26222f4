"""
Input DTOs for authentication API endpoints.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{3,32}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_PASSWORD_BYTES = 72  # bcrypt ignores anything past this


def _validate_password(v: str) -> str:
    if len(v) < 6:
        raise ValueError('Password must be at least 6 characters')
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes')
    return v


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError('Invalid email address')
    return v


class RegisterRequestDto(BaseModel):
    """DTO for account registration."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    username: str = Field(..., description="Unique player name, 3-32 characters")
    email: str = Field(..., max_length=255, description="Unique email address")
    password: str = Field(..., description="Plain password, 6-72 bytes")
    display_name: Optional[str] = Field(None, max_length=64, description="Defaults to the username")

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        v = v.strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError('Username must be 3-32 letters, digits, dots, dashes or underscores')
        return v

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _normalize_email(v)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return _validate_password(v)

    @field_validator('display_name')
    @classmethod
    def validate_display_name(cls, v):
        if v is None:
            return v
        return v.strip() or None


class LoginRequestDto(BaseModel):
    """DTO for login with either email or username."""

    email: Optional[str] = Field(None, description="Account email")
    username: Optional[str] = Field(None, description="Account username")
    password: str = Field(..., min_length=1, description="Plain password")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if v else None

    @field_validator('username')
    @classmethod
    def normalize_username(cls, v):
        return v.strip() if v else None

    @model_validator(mode='after')
    def require_identity(self):
        if not self.email and not self.username:
            raise ValueError('Either email or username is required')
        return self
