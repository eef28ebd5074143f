"""
Family login endpoints.

One shared passcode unlocks the whole household's data. These routes are
the only /api routes reachable without a session cookie.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from ringsledger.config import settings
from ringsledger.services.family_auth import (
    has_family_session,
    issue_session_token,
    passcode_configured,
    passcode_matches,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


class LoginRequest(BaseModel):
    """Request model for logging in."""

    passcode: str = Field(default="", description="The family passcode")
    password: str | None = Field(default=None, description="Alias accepted for older clients")


class OkResponse(BaseModel):
    ok: bool


@router.post("/login", response_model=OkResponse)
async def login(request: LoginRequest, response: Response) -> OkResponse:
    """
    Exchange the family passcode for a session cookie.

    The cookie is HttpOnly, SameSite=Lax and lasts 30 days.
    """
    if not passcode_configured():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server missing FAMILY_PASSCODE",
        )

    candidate = request.passcode or request.password or ""
    if not passcode_matches(candidate):
        logger.warning("Rejected login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Wrong passcode",
        )

    response.set_cookie(
        key=settings.session_cookie_name,
        value=issue_session_token(),
        max_age=settings.session_max_age_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return OkResponse(ok=True)


@router.post("/logout", response_model=OkResponse)
async def logout(response: Response) -> OkResponse:
    """Clear the session cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return OkResponse(ok=True)


@router.get("/me", response_model=OkResponse)
async def me(request: Request) -> OkResponse:
    """Whether the caller holds a valid session."""
    return OkResponse(ok=has_family_session(request))
