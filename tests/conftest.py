import pytest
from fastapi.testclient import TestClient

import database
from auth import issue_session_token
from services import accounts


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / "test.sqlite3")
    monkeypatch.setattr(database, "DB_NAME", path)
    database.init_db()
    return path


@pytest.fixture
def client(db_path):
    from main import app
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_path):
    counter = {"n": 0}

    def _make_user(name=None, email=None, password="secret123"):
        counter["n"] += 1
        name = name or f"user{counter['n']}"
        email = email or f"{name}@example.com"
        return accounts.register_user(name, email, password)

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {issue_session_token(user.id)}"}

    return _auth_headers
