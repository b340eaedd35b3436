"""
Bearer token handling and access gates.

Claims are derived fresh for every request from its own credential; the
gates below are pure decisions over those claims.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from .env import JWT_ALGORITHM
from .errors import Unauthorized
from .logger import get_logger

logger = get_logger()

_BEARER_RE = re.compile(r"^[Bb]earer ")


@dataclass(frozen=True)
class Claims:
    """Verified identity carried by a token."""

    subject: str
    is_admin: bool = False


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an access gate: allowed, or denied with a reason."""

    allowed: bool
    reason: Optional[str] = None

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise Unauthorized(self.reason or "Unauthorized")


ALLOW = AccessDecision(allowed=True)


def create_token(
    username: str,
    is_admin: bool,
    secret_key: str,
    ttl_minutes: Optional[int] = None,
) -> str:
    """Sign a token for a user. Tokens carry no expiry unless ttl_minutes is given."""
    payload: Dict[str, Any] = {"username": username, "isAdmin": bool(is_admin)}
    if ttl_minutes is not None:
        payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
    return jwt.encode(payload, secret_key, algorithm=JWT_ALGORITHM)


def parse_bearer(header: Optional[str]) -> Optional[str]:
    """Pull the token out of an Authorization header value."""
    if not header:
        return None
    token = _BEARER_RE.sub("", header).strip()
    return token or None


def extract_claims(credential: Optional[str], secret_key: str) -> Optional[Claims]:
    """
    Verify a bearer credential and return its claims.

    A missing credential and one that fails verification both yield None;
    verification failures never propagate.
    """
    if not credential:
        return None
    try:
        payload = jwt.decode(credential, secret_key, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug("Ignoring invalid token", error=type(e).__name__)
        return None
    if not isinstance(payload, dict):
        return None

    subject = payload.get("username")
    return Claims(
        subject=subject if isinstance(subject, str) else "",
        is_admin=payload.get("isAdmin") is True,
    )


def require_logged_in(claims: Optional[Claims]) -> AccessDecision:
    if claims is not None and claims.subject:
        return ALLOW
    return AccessDecision(False, "Must be logged in to access this route.")


def require_admin(claims: Optional[Claims]) -> AccessDecision:
    if claims is not None and claims.is_admin is True:
        return ALLOW
    return AccessDecision(False, "Must be an administrator to access this route.")


def require_admin_or_self(claims: Optional[Claims], target_subject: str) -> AccessDecision:
    """Allow admins, or the user the route is about (exact, case-sensitive match)."""
    if claims is not None and claims.subject and (
        claims.is_admin is True or claims.subject == target_subject
    ):
        return ALLOW
    return AccessDecision(False, "Must be an admin or correct user to access this route.")
