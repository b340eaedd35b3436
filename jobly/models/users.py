"""Data access for the users table."""

from typing import Any, Dict, List, Mapping

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from sqlalchemy.engine import Connection

from ..database import run_query
from ..errors import InvalidInput, NotFound, Unauthorized
from ..logger import get_logger
from ..sql import build_set_clause

logger = get_logger()

ph = PasswordHasher()

USER_COLUMNS = (
    'username, first_name AS "firstName", last_name AS "lastName", '
    'email, is_admin AS "isAdmin"'
)

FIELD_NAME_MAP = {
    "firstName": "first_name",
    "lastName": "last_name",
    "isAdmin": "is_admin",
}


def _shape(row: Mapping[str, Any]) -> Dict[str, Any]:
    user = dict(row)
    # SQLite hands booleans back as 0/1
    user["isAdmin"] = bool(user["isAdmin"])
    return user


def authenticate(conn: Connection, username: str, password: str) -> Dict[str, Any]:
    """
    Check a username/password pair.

    Returns:
        {username, firstName, lastName, email, isAdmin}

    Raises:
        Unauthorized: If the user is unknown or the password is wrong
    """
    rows = run_query(
        conn,
        f"SELECT {USER_COLUMNS}, password FROM users WHERE username = $1",
        [username],
    )
    if rows:
        user = rows[0]
        stored = user.pop("password")
        try:
            if ph.verify(stored, password):
                return _shape(user)
        except (VerifyMismatchError, InvalidHashError):
            pass
        except VerificationError as exc:
            logger.error("argon2 verification error", error=str(exc))
            raise
    logger.info("Failed login", username=username)
    raise Unauthorized("Invalid username/password")


def register(conn: Connection, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create a user with a hashed password.

    Raises:
        InvalidInput: On a duplicate username
    """
    username = data["username"]
    if run_query(conn, "SELECT username FROM users WHERE username = $1", [username]):
        raise InvalidInput(f"Duplicate username: {username}")

    rows = run_query(
        conn,
        f"""INSERT INTO users (username, password, first_name, last_name, email, is_admin)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {USER_COLUMNS}""",
        [
            username,
            ph.hash(data["password"]),
            data["firstName"],
            data["lastName"],
            data["email"],
            bool(data.get("isAdmin", False)),
        ],
    )
    logger.info("User registered", username=username)
    return _shape(rows[0])


def find_all(conn: Connection) -> List[Dict[str, Any]]:
    rows = run_query(conn, f"SELECT {USER_COLUMNS} FROM users ORDER BY username")
    return [_shape(row) for row in rows]


def get(conn: Connection, username: str) -> Dict[str, Any]:
    rows = run_query(conn, f"SELECT {USER_COLUMNS} FROM users WHERE username = $1", [username])
    if not rows:
        raise NotFound(f"No user: {username}")
    return _shape(rows[0])


def update(conn: Connection, username: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partial update. Data can include {firstName, lastName, password, email, isAdmin}.

    A new password is hashed before it is stored.
    """
    data = dict(data)
    if "password" in data:
        if not data["password"]:
            raise InvalidInput("password: must not be empty")
        data["password"] = ph.hash(data["password"])

    fragment = build_set_clause(data, FIELD_NAME_MAP)
    username_idx = len(fragment.values) + 1

    rows = run_query(
        conn,
        f"""UPDATE users
            SET {fragment.set_cols}
            WHERE username = ${username_idx}
            RETURNING {USER_COLUMNS}""",
        [*fragment.values, username],
    )
    if not rows:
        raise NotFound(f"No user: {username}")
    logger.info("User updated", username=username, fields=list(data))
    return _shape(rows[0])


def remove(conn: Connection, username: str) -> None:
    rows = run_query(conn, "DELETE FROM users WHERE username = $1 RETURNING username", [username])
    if not rows:
        raise NotFound(f"No user: {username}")
    logger.info("User removed", username=username)
