import re
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

# Password complexity requirements
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
SPECIAL_CHARACTERS = r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>\/?]"
COMMON_PASSWORDS = {"password", "12345678", "qwerty123", "admin123"}


class UserRegister(BaseModel):
    """Registration request."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_-]+$")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH
    )
    display_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password_complexity(cls, v: str) -> str:
        """
        Require a lowercase letter, an uppercase letter, a digit and a
        special character, and reject well-known weak passwords.
        """
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain a lowercase letter")

        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain an uppercase letter")

        if not re.search(r"\d", v):
            raise ValueError("Password must contain a digit")

        if not re.search(SPECIAL_CHARACTERS, v):
            raise ValueError("Password must contain a special character (!@#$%^&* etc.)")

        if v.lower() in COMMON_PASSWORDS:
            raise ValueError("This password is too common")

        return v


class UserLogin(BaseModel):
    """Login request."""

    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class TokenData(BaseModel):
    """Claims read back from a JWT."""

    user_id: Optional[str] = None
    username: Optional[str] = None


class UserOut(BaseModel):
    id: UUID
    username: str
    display_name: str

    class Config:
        from_attributes = True


class UserWithToken(BaseModel):
    """Login or registration response: user info plus token."""

    user: UserOut
    token: Token
