"""
Shared household session.

There is one identity: whoever knows the family passcode. A successful
login sets a cookie holding "ok:<issued-millis>.<signature>", where the
signature is an HMAC-SHA256 of the payload keyed by the passcode.
Changing the passcode therefore invalidates every existing session.
"""

import hashlib
import hmac
import logging
import time

from fastapi import HTTPException, Request, status

from ringsledger.config import settings

logger = logging.getLogger(__name__)

SESSION_PREFIX = "ok:"


def _sign(value: str, secret: str) -> str:
    return hmac.new(secret.encode(), value.encode(), hashlib.sha256).hexdigest()


def passcode_configured() -> bool:
    return bool(settings.family_passcode)


def passcode_matches(candidate: str) -> bool:
    """Constant-time comparison against the configured passcode."""
    if not candidate or not settings.family_passcode:
        return False
    return hmac.compare_digest(candidate.encode(), settings.family_passcode.encode())


def issue_session_token(issued_ms: int | None = None) -> str:
    """Create a signed session token."""
    if issued_ms is None:
        issued_ms = int(time.time() * 1000)
    payload = f"{SESSION_PREFIX}{issued_ms}"
    return f"{payload}.{_sign(payload, settings.family_passcode)}"


def verify_session_token(token: str | None, now_ms: int | None = None) -> bool:
    """
    Check a session token's signature and age.

    Tokens older than the session max age are rejected even if the
    browser still presents them.
    """
    if not token or not settings.family_passcode:
        return False

    payload, _, signature = token.partition(".")
    if not payload.startswith(SESSION_PREFIX) or not signature:
        return False

    if not hmac.compare_digest(_sign(payload, settings.family_passcode), signature):
        return False

    try:
        issued_ms = int(payload[len(SESSION_PREFIX) :])
    except ValueError:
        return False

    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return now_ms - issued_ms <= settings.session_max_age_seconds * 1000


def has_family_session(request: Request) -> bool:
    return verify_session_token(request.cookies.get(settings.session_cookie_name))


async def require_family_session(request: Request) -> None:
    """
    Dependency guarding every data endpoint.

    Raises:
        HTTPException: 401 if the session cookie is missing or invalid
    """
    if not has_family_session(request):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
