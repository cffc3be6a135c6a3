"""
NoteShare Backend - Auth Service
==================================

What:  Registration, login and email verification on top of the identity
       collaborator.
How:   Validates input locally first, then makes exactly one identity call
       and maps its failures onto the API's error kinds.
Who:   Called by the /register, /login and /verify route handlers.

Error mapping:
    register: bad domain                      → ValidationError (400), no identity call
              identity failure                → ServiceError (500), identity's message
    login:    any identity failure            → AuthError (401), generic message
    verify:   identity rejected the code      → ValidationError (400)
              identity unreachable            → ServiceError (500)
"""

import logging
import re
from typing import Any, Dict, Iterable

from noteshare.config import settings
from noteshare.dependencies import ServiceContext
from noteshare.exceptions import AuthError, IdentityServiceError, ServiceError, ValidationError

logger = logging.getLogger(__name__)


def build_email_pattern(domains: Iterable[str]) -> "re.Pattern[str]":
    """Regex matching emails that end in @<one of domains>."""
    alternatives = "|".join(re.escape(d) for d in domains)
    return re.compile(rf"@({alternatives})$")


def domain_rule_message(domains: Iterable[str]) -> str:
    # "Email must end with @spelman.edu or @morehouse.edu."
    return "Email must end with " + " or ".join(f"@{d}" for d in domains) + "."


class AuthService:
    """Stateless; the collaborators arrive with each call."""

    def __init__(self, allowed_domains: Iterable[str] = ()):
        domains = list(allowed_domains) or settings.allowed_email_domains_list
        self.email_pattern = build_email_pattern(domains)
        self.domain_message = domain_rule_message(domains)

    def validate_email(self, email: str) -> None:
        if not email or not self.email_pattern.search(email):
            raise ValidationError(message=self.domain_message, field="email")

    async def register(self, services: ServiceContext, name: str, email: str, password: str) -> None:
        """
        Create an account for an institutional email.

        The name is passed to the identity service as profile metadata.
        The identity service sends the 6-digit verification code by email.
        """
        logger.info("Received registration request for email: %s", email)
        self.validate_email(email)

        try:
            await services.identity.sign_up(email, password, metadata={"name": name})
        except IdentityServiceError as e:
            logger.error("Registration error for %s: %s", email, e.message)
            raise ServiceError(message=e.message or "Error registering user", context=e.context)

    async def login(self, services: ServiceContext, email: str, password: str) -> Dict[str, Any]:
        """Check credentials; returns the identity service's user object."""
        logger.info("Received login request for email: %s", email)
        try:
            return await services.identity.sign_in_with_password(email, password)
        except IdentityServiceError as e:
            logger.warning("Login error for %s: %s", email, e.message)
            raise AuthError(context=e.context)

    async def verify(self, services: ServiceContext, email: str, code: str) -> None:
        """Confirm the signup verification code."""
        logger.info("Verifying email: %s", email)
        try:
            await services.identity.verify_otp(email, code, type="signup")
        except IdentityServiceError as e:
            if e.rejected:
                logger.warning("Verification failed for %s: %s", email, e.message)
                raise ValidationError(
                    message="Invalid verification code.",
                    field="verificationCode",
                    context=e.context,
                )
            logger.error("Verification error for %s: %s", email, e.message)
            raise ServiceError(message="Error verifying email", context=e.context)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
