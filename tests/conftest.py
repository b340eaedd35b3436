"""
Pytest configuration and shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from jobly.api import create_app
from jobly.auth import create_token
from jobly.database import get_engine, init_database, run_query
from jobly.models import users

TEST_SECRET = "test-secret-key"


def _seed(conn) -> None:
    for handle, n in (("c1", 1), ("c2", 2), ("c3", 3)):
        run_query(
            conn,
            """INSERT INTO companies (handle, name, num_employees, description, logo_url)
               VALUES ($1, $2, $3, $4, $5)""",
            [handle, handle.upper(), n, f"Desc{n}", f"http://{handle}.img"],
        )
    for title, salary, equity, handle in (
        ("J1", 100, 0.1, "c1"),
        ("J2", 200, 0.2, "c1"),
        ("J3", 300, 0, "c2"),
        ("J4", None, None, "c3"),
    ):
        run_query(
            conn,
            """INSERT INTO jobs (title, salary, equity, company_handle)
               VALUES ($1, $2, $3, $4)""",
            [title, salary, equity, handle],
        )
    users.register(conn, {
        "username": "u1",
        "password": "password1",
        "firstName": "U1F",
        "lastName": "U1L",
        "email": "user1@user.com",
        "isAdmin": False,
    })
    users.register(conn, {
        "username": "admin",
        "password": "password2",
        "firstName": "AdF",
        "lastName": "AdL",
        "email": "admin@user.com",
        "isAdmin": True,
    })


@pytest.fixture
def engine(tmp_path):
    """Seeded SQLite database in a temp dir."""
    engine = get_engine(f"sqlite:///{tmp_path / 'jobly_test.db'}")
    init_database(engine)
    with engine.begin() as conn:
        _seed(conn)
    yield engine
    engine.dispose()


@pytest.fixture
def conn(engine):
    """Connection whose changes are rolled back when the test ends."""
    with engine.connect() as connection:
        yield connection


@pytest.fixture
def u1_token() -> str:
    return create_token("u1", False, TEST_SECRET)


@pytest.fixture
def admin_token() -> str:
    return create_token("admin", True, TEST_SECRET)


@pytest.fixture
def client(engine) -> TestClient:
    return TestClient(create_app(engine=engine, secret_key=TEST_SECRET))


@pytest.fixture
def u1_headers(u1_token):
    return {"Authorization": f"Bearer {u1_token}"}


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def secret_key() -> str:
    return TEST_SECRET
