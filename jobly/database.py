"""
Database schema, connection management and the parameterized query executor.

Tables are declared with SQLAlchemy; data-access code issues hand-written SQL
with positional ``$1, $2, ...`` placeholders through ``run_query``.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Sequence

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()

_PLACEHOLDER_RE = re.compile(r"\$(\d+)")


class Company(Base):
    """Company table."""

    __tablename__ = "companies"

    handle = Column(String(25), primary_key=True)  # lowercase slug
    name = Column(Text, unique=True, nullable=False)
    num_employees = Column(Integer, CheckConstraint("num_employees >= 0"))
    description = Column(Text, nullable=False)
    logo_url = Column(Text)


class Job(Base):
    """Job posting table."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer, CheckConstraint("salary >= 0"))
    equity = Column(Numeric, CheckConstraint("equity <= 1.0"))
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    )


class User(Base):
    """User table. Passwords are stored as argon2 hashes."""

    __tablename__ = "users"

    username = Column(String(25), primary_key=True)
    password = Column(Text, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)


def _enable_sqlite_foreign_keys(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(database_url: str) -> Engine:
    """
    Create an engine for the given SQLAlchemy URL.

    SQLite engines get foreign key enforcement switched on so that deleting
    a company cascades to its jobs. Bound parameters are kept out of
    exception messages, since they can carry password hashes.
    """
    if database_url.startswith("sqlite"):
        # requests may be served from worker threads
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            hide_parameters=True,
        )
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(database_url, hide_parameters=True)


def init_database(engine: Engine) -> None:
    """
    Initialize database and create tables.

    Args:
        engine: Engine returned by get_engine
    """
    if engine.dialect.name == "sqlite" and engine.url.database not in (None, "", ":memory:"):
        Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(engine)


def run_query(conn: Connection, sql: str, values: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    """
    Execute one statement with positional placeholders.

    Args:
        conn: Open connection (normally inside engine.begin())
        sql: Statement using $1, $2, ... placeholders
        values: Values where values[i] binds $<i+1>

    Returns:
        Result rows as dicts (empty list for statements without rows)

    Raises:
        ValueError: If the placeholders and values do not line up
    """
    positions = {int(n) for n in _PLACEHOLDER_RE.findall(sql)}
    if positions != set(range(1, len(values) + 1)):
        raise ValueError(
            f"Placeholders {sorted(positions)} do not match {len(values)} values"
        )

    statement = text(_PLACEHOLDER_RE.sub(r":p\1", sql))
    params = {f"p{idx}": value for idx, value in enumerate(values, start=1)}
    result = conn.execute(statement, params)
    if not result.returns_rows:
        return []
    return [dict(row) for row in result.mappings()]
