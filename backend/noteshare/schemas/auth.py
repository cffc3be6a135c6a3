"""
NoteShare Backend - Auth Request/Response Schemas
===================================================

Request bodies for /register, /login and /verify, and their responses.
Field names follow the front-end's JSON (`verificationCode` is camelCase).
"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(description="Display name, stored as identity profile data")
    email: str = Field(description="Institutional email address")
    password: str = Field(description="Password, passed through to the identity service")


class LoginRequest(BaseModel):
    email: str
    password: str


class VerifyRequest(BaseModel):
    email: str
    verificationCode: str = Field(description="6-digit code sent by email at signup")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    user: Dict[str, Any] = Field(description="User object returned by the identity service")
