"""
Pydantic schemas for registration, login and token verification.
"""

from typing import Any, Optional

from pydantic import EmailStr, Field

from tickettango.schemas.common import CamelModel


class UserCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=8, max_length=72)
    email: Optional[EmailStr] = None


class UserLogin(CamelModel):
    username: str
    password: str


class UserSummary(CamelModel):
    id: int
    username: str


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserSummary


class TokenVerification(CamelModel):
    valid: bool
    user: dict[str, Any]
