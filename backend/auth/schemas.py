# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, Field


# -- Requests --------------------------------------------------------------
# Field names on the wire are camelCase (the frontend's contract); the
# Python attribute names are snake_case.


class RegisterRequest(BaseModel):
    username: str
    password: str
    security_question: str = Field(alias="securityQuestion")
    security_answer: str = Field(alias="securityAnswer")

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    username: str
    password: str


class ResetPasswordRequest(BaseModel):
    username: str
    security_answer: str = Field(alias="securityAnswer")
    new_password: str = Field(alias="newPassword")

    model_config = {"populate_by_name": True}


# -- Responses -------------------------------------------------------------


class UserPublic(BaseModel):
    """Public projection of a user – never carries either hash."""

    id: int
    username: str
    preferences: Dict[str, Any]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    user: UserPublic
    token: str
    expires_at: datetime


class SessionInfoResponse(BaseModel):
    user: UserPublic
    expires_at: datetime


class MessageResponse(BaseModel):
    message: str
