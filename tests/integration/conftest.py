"""Fixtures for API integration tests.

Hey future me - every test gets its own app with a temp-file SQLite DB and a temp media dir,
built through create_app(settings). The TestClient MUST be used as a context manager,
otherwise the lifespan never runs and there is no db/storage on app.state.
"""

import sqlite3
from collections.abc import Callable, Iterator
from contextlib import closing
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from merch_archive.config import DatabaseSettings, Settings, StorageSettings
from merch_archive.main import create_app

PASSWORD = "secret123"


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Location of the test database file."""
    return tmp_path / "test.db"


@pytest.fixture
def settings(tmp_path: Path, db_path: Path) -> Settings:
    """Settings pointing at temp storage."""
    return Settings(
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{db_path}"),
        storage=StorageSettings(photo_path=tmp_path / "media"),
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Test client with the app lifespan running."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def login(client: TestClient) -> Callable[[str], dict[str, str]]:
    """Sign up + sign in a collector, return Authorization headers.

    The session cookie is cleared again so requests without headers stay anonymous.
    """

    def _login(email: str) -> dict[str, str]:
        response = client.post("/api/auth/signup", json={"email": email, "password": PASSWORD})
        assert response.status_code == 201, response.text
        response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture
def make_admin(db_path: Path) -> Callable[[str], None]:
    """Flip is_admin for a username straight in the database."""

    def _make_admin(username: str) -> None:
        with closing(sqlite3.connect(db_path)) as conn, conn:
            conn.execute("UPDATE profiles SET is_admin = 1 WHERE username = ?", (username,))

    return _make_admin
