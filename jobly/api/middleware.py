from __future__ import annotations

from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..auth import extract_claims, parse_bearer
from ..logger import get_logger

logger = get_logger()


class AuthenticateMiddleware(BaseHTTPMiddleware):
    """
    Attach verified claims to request.state.claims.

    A missing or invalid token is not an error here: claims are simply None
    and the per-route gates decide what that means.
    """

    def __init__(self, app, *, secret_key: str):
        super().__init__(app)
        self.secret_key = secret_key

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        token = parse_bearer(request.headers.get("authorization"))
        request.state.claims = extract_claims(token, self.secret_key)
        logger.record_request()

        response = await call_next(request)

        claims = request.state.claims
        logger.debug(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            subject=claims.subject if claims else None,
        )
        return response
