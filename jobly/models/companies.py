"""Data access for the companies table."""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.engine import Connection

from ..database import run_query
from ..errors import InvalidInput, NotFound
from ..logger import get_logger
from ..sql import EntityKind, build_filter_clause, build_set_clause

logger = get_logger()

COMPANY_COLUMNS = (
    'handle, name, description, '
    'num_employees AS "numEmployees", logo_url AS "logoUrl"'
)

FIELD_NAME_MAP = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}


def create(conn: Connection, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create a company.

    Args:
        data: {handle, name, description, numEmployees, logoUrl}

    Returns:
        {handle, name, description, numEmployees, logoUrl}

    Raises:
        InvalidInput: If the handle or the name is already taken
    """
    handle = data["handle"]
    if run_query(conn, "SELECT handle FROM companies WHERE handle = $1", [handle]):
        raise InvalidInput(f"Duplicate company: {handle}")
    _check_name_free(conn, data["name"])

    rows = run_query(
        conn,
        f"""INSERT INTO companies (handle, name, description, num_employees, logo_url)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING {COMPANY_COLUMNS}""",
        [
            handle,
            data["name"],
            data["description"],
            data.get("numEmployees"),
            data.get("logoUrl"),
        ],
    )
    logger.info("Company created", handle=handle)
    return rows[0]


def find_all(conn: Connection, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    Find all companies, optionally filtered.

    Valid filters: nameLike (case-insensitive substring of name),
    minEmployees, maxEmployees.
    """
    fragment = build_filter_clause(filters or {}, EntityKind.COMPANY)
    return run_query(
        conn,
        f"""SELECT {COMPANY_COLUMNS}
            FROM companies
            {fragment.where_clause}
            ORDER BY name""",
        fragment.values,
    )


def get(conn: Connection, handle: str) -> Dict[str, Any]:
    """Return a company with its jobs ([{id, title, salary, equity}, ...])."""
    rows = run_query(
        conn,
        f"""SELECT {COMPANY_COLUMNS}
            FROM companies
            WHERE handle = $1""",
        [handle],
    )
    if not rows:
        raise NotFound(f"No company: {handle}")

    company = rows[0]
    company["jobs"] = run_query(
        conn,
        """SELECT id, title, salary, equity
           FROM jobs
           WHERE company_handle = $1
           ORDER BY id""",
        [handle],
    )
    return company


def update(conn: Connection, handle: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partial update: only the fields present in data change.

    Data can include {name, description, numEmployees, logoUrl}.
    """
    if "name" in data:
        _check_name_free(conn, data["name"], handle)

    fragment = build_set_clause(data, FIELD_NAME_MAP)
    handle_idx = len(fragment.values) + 1

    rows = run_query(
        conn,
        f"""UPDATE companies
            SET {fragment.set_cols}
            WHERE handle = ${handle_idx}
            RETURNING {COMPANY_COLUMNS}""",
        [*fragment.values, handle],
    )
    if not rows:
        raise NotFound(f"No company: {handle}")
    logger.info("Company updated", handle=handle, fields=list(data))
    return rows[0]


def _check_name_free(conn: Connection, name: str, handle: Optional[str] = None) -> None:
    """Raise InvalidInput if a company other than handle already uses name."""
    rows = run_query(conn, "SELECT handle FROM companies WHERE name = $1", [name])
    if any(row["handle"] != handle for row in rows):
        raise InvalidInput(f"Duplicate company name: {name}")


def remove(conn: Connection, handle: str) -> None:
    rows = run_query(
        conn,
        "DELETE FROM companies WHERE handle = $1 RETURNING handle",
        [handle],
    )
    if not rows:
        raise NotFound(f"No company: {handle}")
    logger.info("Company removed", handle=handle)
