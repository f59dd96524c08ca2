"""Authentication schemas for request/response validation."""

from pydantic import BaseModel, EmailStr, field_validator

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input.
PASSWORD_MAX_BYTES = 72


def check_password(v: str) -> str:
    """Shared password rules for registration and profile updates."""
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters")
    if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be {PASSWORD_MAX_BYTES} bytes or less")
    return v


class RegisterRequest(BaseModel):
    """User registration request schema."""

    mail: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password length."""
        return check_password(v)


class LoginRequest(BaseModel):
    """User login request schema."""

    acct: str  # Can be mail or name
    password: str


class TokenResponse(BaseModel):
    """Session token issued at registration or login (also set as a cookie)."""

    uid: int
    access_token: str
    token_type: str = "bearer"
