"""
NoteShare Backend - Auth Route Handlers
=========================================

What:  POST /register, POST /login, POST /verify.
How:   Parse the JSON body, delegate to AuthService, wrap the result.
       Errors are raised as NoteShareError subclasses and formatted by the
       global handlers in main.py.
"""

import logging

from fastapi import APIRouter, Depends

from noteshare.dependencies import ServiceContext, get_services
from noteshare.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    VerifyRequest,
)
from noteshare.schemas.note import ErrorResponse
from noteshare.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/register",
    response_model=MessageResponse,
    responses={
        400: {"description": "Email outside the allowed domains", "model": ErrorResponse},
        500: {"description": "Identity service error", "model": ErrorResponse},
    },
    summary="Register with an institutional email",
)
async def register(
    body: RegisterRequest,
    services: ServiceContext = Depends(get_services),
) -> MessageResponse:
    await auth_service.register(services, name=body.name, email=body.email, password=body.password)
    return MessageResponse(message="Registration successful. Check your email for verification.")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Sign in with email and password",
)
async def login(
    body: LoginRequest,
    services: ServiceContext = Depends(get_services),
) -> LoginResponse:
    user = await auth_service.login(services, email=body.email, password=body.password)
    return LoginResponse(user=user)


@router.post(
    "/verify",
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid or expired code", "model": ErrorResponse},
        500: {"description": "Identity service unreachable", "model": ErrorResponse},
    },
    summary="Confirm the 6-digit signup code",
)
async def verify(
    body: VerifyRequest,
    services: ServiceContext = Depends(get_services),
) -> MessageResponse:
    await auth_service.verify(services, email=body.email, code=body.verificationCode)
    return MessageResponse(message="Email verified successfully")
