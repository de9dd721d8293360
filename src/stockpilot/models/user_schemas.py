"""Pydantic schemas for User API."""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials posted by the login screen."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Schema for user response (no password)."""

    id: uuid.UUID
    username: str
    display_name: str
    role: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
