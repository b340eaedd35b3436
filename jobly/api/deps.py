"""FastAPI dependencies: database connection and access gates."""

from typing import Iterator, Optional

from fastapi import Depends, Request
from sqlalchemy.engine import Connection

from ..auth import Claims, require_admin, require_admin_or_self


def get_conn(request: Request) -> Iterator[Connection]:
    """One transaction per request; rolled back if the handler raises."""
    with request.app.state.engine.begin() as conn:
        yield conn


def get_claims(request: Request) -> Optional[Claims]:
    return getattr(request.state, "claims", None)


def ensure_admin(claims: Optional[Claims] = Depends(get_claims)) -> Claims:
    require_admin(claims).raise_for_denial()
    return claims


def ensure_admin_or_self(username: str, claims: Optional[Claims] = Depends(get_claims)) -> Claims:
    """Gate for /users/{username} routes."""
    require_admin_or_self(claims, username).raise_for_denial()
    return claims
