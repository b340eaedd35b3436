"""
Tests for the command line entry point.
"""

import jwt
from sqlalchemy import inspect

from jobly import __version__
from jobly.app import main
from jobly.database import get_engine


def test_version(capsys):
    main(["--version"])
    assert capsys.readouterr().out.strip() == __version__


def test_token_command(capsys, monkeypatch):
    monkeypatch.setenv("JOBLY_SECRET_KEY", "cli-secret")
    monkeypatch.delenv("JOBLY_TOKEN_TTL_MINUTES", raising=False)

    main(["token", "--username", "u1", "--admin"])

    token = capsys.readouterr().out.strip()
    assert jwt.decode(token, "cli-secret", algorithms=["HS256"]) == {"username": "u1", "isAdmin": True}


def test_init_db_command(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'cli' / 'jobly.db'}"

    main(["init-db", "--database-url", url])

    assert "Database ready" in capsys.readouterr().out
    assert "companies" in inspect(get_engine(url)).get_table_names()
