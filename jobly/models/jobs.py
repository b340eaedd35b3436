"""Data access for the jobs table."""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.engine import Connection

from ..database import run_query
from ..errors import InvalidInput, NotFound
from ..logger import get_logger
from ..sql import EntityKind, build_filter_clause, build_set_clause

logger = get_logger()

JOB_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'


def create(conn: Connection, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create a job.

    Args:
        data: {title, salary, equity, companyHandle}

    Returns:
        {id, title, salary, equity, companyHandle}

    Raises:
        InvalidInput: If the company does not exist
    """
    handle = data["companyHandle"]
    if not run_query(conn, "SELECT handle FROM companies WHERE handle = $1", [handle]):
        raise InvalidInput(f"No company: {handle}")

    rows = run_query(
        conn,
        f"""INSERT INTO jobs (title, salary, equity, company_handle)
            VALUES ($1, $2, $3, $4)
            RETURNING {JOB_COLUMNS}""",
        [data["title"], data.get("salary"), data.get("equity"), handle],
    )
    logger.info("Job created", id=rows[0]["id"], company=handle)
    return rows[0]


def find_all(conn: Connection, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    Find all jobs, optionally filtered.

    Valid filters: title (case-insensitive substring), minSalary,
    hasEquity (True keeps only jobs with non-zero equity; False is no filter).
    """
    fragment = build_filter_clause(filters or {}, EntityKind.JOB)
    return run_query(
        conn,
        f"""SELECT {JOB_COLUMNS}
            FROM jobs
            {fragment.where_clause}
            ORDER BY id""",
        fragment.values,
    )


def get(conn: Connection, job_id: int) -> Dict[str, Any]:
    """
    Return {id, title, salary, equity, company} where company is
    {handle, name, description, numEmployees, logoUrl}.
    """
    rows = run_query(
        conn,
        """SELECT j.id,
                  j.title,
                  j.salary,
                  j.equity,
                  c.handle,
                  c.name,
                  c.description,
                  c.num_employees AS "numEmployees",
                  c.logo_url AS "logoUrl"
           FROM jobs AS j
           JOIN companies AS c ON c.handle = j.company_handle
           WHERE j.id = $1""",
        [job_id],
    )
    if not rows:
        raise NotFound(f"No job: {job_id}")

    row = rows[0]
    return {
        "id": row["id"],
        "title": row["title"],
        "salary": row["salary"],
        "equity": row["equity"],
        "company": {
            "handle": row["handle"],
            "name": row["name"],
            "description": row["description"],
            "numEmployees": row["numEmployees"],
            "logoUrl": row["logoUrl"],
        },
    }


def update(conn: Connection, job_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Partial update. Data can include {title, salary, equity}."""
    fragment = build_set_clause(data, {})
    id_idx = len(fragment.values) + 1

    rows = run_query(
        conn,
        f"""UPDATE jobs
            SET {fragment.set_cols}
            WHERE id = ${id_idx}
            RETURNING {JOB_COLUMNS}""",
        [*fragment.values, job_id],
    )
    if not rows:
        raise NotFound(f"No job: {job_id}")
    logger.info("Job updated", id=job_id, fields=list(data))
    return rows[0]


def remove(conn: Connection, job_id: int) -> None:
    rows = run_query(conn, "DELETE FROM jobs WHERE id = $1 RETURNING id", [job_id])
    if not rows:
        raise NotFound(f"No job: {job_id}")
    logger.info("Job removed", id=job_id)
