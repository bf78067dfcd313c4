"""Pydantic schemas for registration, login and the current user."""

import uuid

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    """Returned by both register and login."""
    token: str
    username: str


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    name: str

    model_config = {"from_attributes": True}
