"""
FastAPI application factory.

Errors raised by the core and data-access layer are mapped here to
{"error": {"message": ..., "status": ...}} responses.
"""

from __future__ import annotations

import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.engine import Engine
from starlette.responses import JSONResponse

from .. import __version__
from ..database import get_engine, init_database
from ..env import get_database_url, get_secret_key, get_token_ttl_minutes
from ..errors import InvalidInput, JoblyError, NotFound, Unauthorized
from ..logger import get_logger
from ..schema import format_errors
from .middleware import AuthenticateMiddleware
from .routes_auth import router as auth_router
from .routes_companies import router as companies_router
from .routes_jobs import router as jobs_router
from .routes_users import router as users_router

logger = get_logger()


def _error_response(status: int, message) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": {"message": message, "status": status}})


async def handle_jobly_error(request: Request, exc: JoblyError) -> JSONResponse:
    if isinstance(exc, Unauthorized):
        logger.record_denial()
        logger.info("Access denied", path=request.url.path, reason=exc.message)
    elif isinstance(exc, InvalidInput):
        logger.record_invalid_input()
    elif isinstance(exc, NotFound):
        logger.record_not_found()
    return _error_response(exc.status_code, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.record_invalid_input()
    return _error_response(400, format_errors(exc))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.record_error(type(exc).__name__)
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=type(exc).__name__,
        traceback="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )
    return _error_response(500, "Internal Server Error")


def create_app(
    engine: Optional[Engine] = None,
    secret_key: Optional[str] = None,
    token_ttl_minutes: Optional[int] = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        engine: Database engine (default: from JOBLY_DATABASE_URL, tables created)
        secret_key: Token signing key (default: JOBLY_SECRET_KEY)
        token_ttl_minutes: Token lifetime (default: JOBLY_TOKEN_TTL_MINUTES)
    """
    if engine is None:
        engine = get_engine(get_database_url())
        init_database(engine)
    secret_key = secret_key or get_secret_key()
    if token_ttl_minutes is None:
        token_ttl_minutes = get_token_ttl_minutes()

    app = FastAPI(title="Jobly", version=__version__)
    app.state.engine = engine
    app.state.secret_key = secret_key
    app.state.token_ttl_minutes = token_ttl_minutes

    app.add_middleware(AuthenticateMiddleware, secret_key=secret_key)

    app.add_exception_handler(JoblyError, handle_jobly_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(auth_router)
    app.include_router(companies_router)
    app.include_router(jobs_router)
    app.include_router(users_router)
    return app
