from fastapi import APIRouter, Depends, Request
from sqlalchemy.engine import Connection

from ..models import users
from ..schema import UserNew, UserUpdate
from .deps import ensure_admin, ensure_admin_or_self, get_conn
from .routes_auth import issue_token

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=201, dependencies=[Depends(ensure_admin)])
def create_user(request: Request, data: UserNew, conn: Connection = Depends(get_conn)):
    """Admin-only: create a user (possibly another admin) and return a token for it."""
    user = users.register(conn, data.model_dump())
    return {"user": user, "token": issue_token(request, user)}


@router.get("", dependencies=[Depends(ensure_admin)])
def list_users(conn: Connection = Depends(get_conn)):
    return {"users": users.find_all(conn)}


@router.get("/{username}", dependencies=[Depends(ensure_admin_or_self)])
def get_user(username: str, conn: Connection = Depends(get_conn)):
    return {"user": users.get(conn, username)}


@router.patch("/{username}", dependencies=[Depends(ensure_admin_or_self)])
def update_user(username: str, data: UserUpdate, conn: Connection = Depends(get_conn)):
    return {"user": users.update(conn, username, data.model_dump(exclude_unset=True))}


@router.delete("/{username}", dependencies=[Depends(ensure_admin_or_self)])
def delete_user(username: str, conn: Connection = Depends(get_conn)):
    users.remove(conn, username)
    return {"deleted": username}
