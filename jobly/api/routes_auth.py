from typing import Any, Mapping

from fastapi import APIRouter, Depends, Request
from sqlalchemy.engine import Connection

from ..auth import create_token
from ..models import users
from ..schema import UserAuth, UserRegister
from .deps import get_conn

router = APIRouter(prefix="/auth", tags=["auth"])


def issue_token(request: Request, user: Mapping[str, Any]) -> str:
    state = request.app.state
    return create_token(
        user["username"],
        user["isAdmin"],
        state.secret_key,
        ttl_minutes=state.token_ttl_minutes,
    )


@router.post("/token")
def login(request: Request, data: UserAuth, conn: Connection = Depends(get_conn)):
    """Exchange username/password for a token."""
    user = users.authenticate(conn, data.username, data.password)
    return {"token": issue_token(request, user)}


@router.post("/register", status_code=201)
def register(request: Request, data: UserRegister, conn: Connection = Depends(get_conn)):
    """Self sign-up. Registered users are never admins."""
    user = users.register(conn, {**data.model_dump(), "isAdmin": False})
    return {"token": issue_token(request, user)}
