"""Pydantic schemas for registration, login and user info.

Learn: Field names on the wire are camelCase (`lastName`, `createdAt`) to
match the browser client, so models declare aliases and accept either
spelling on input (populate_by_name).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    token: str
    message: str = "Login successful"


class MessageResponse(BaseModel):
    message: str


class UserRead(BaseModel):
    """Public view of a user. Never includes the password hash."""
    id: str
    name: str
    last_name: Optional[str] = Field(None, serialization_alias="lastName")
    email: str
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
