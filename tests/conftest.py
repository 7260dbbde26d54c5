"""
tests/conftest.py -- Shared fixtures for the auth service tests.

This module provides:
  - db: a fresh schema in the in-memory SQLite database for every test
  - app / client: a Flask app built with TestingConfig and its test client
  - manager: the SessionManager wired into that app
  - FakeClock / make_manager: a SessionManager on a controllable clock

APP_ENV and DATABASE_URL must be set before anything imports `models`,
because the DBStorage singleton picks its engine at import time.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest

from api import create_app
from api.config import TestingConfig
from models import storage
from services.directory import UserDirectory
from services.ledger import RefreshTokenLedger
from services.session_manager import SessionManager
from services.settings import AuthSettings

TEST_SECRET = TestingConfig.JWT_SECRET
PASSWORD = "Secretpass1!"


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def fast_settings(**overrides) -> AuthSettings:
    values = dict(
        secret=TEST_SECRET,
        hash_time_cost=1,
        hash_memory_cost=1024,
        hash_parallelism=1,
    )
    values.update(overrides)
    return AuthSettings(**values)


@pytest.fixture
def db():
    storage.drop_all()
    storage.reload()
    yield storage
    storage.close()


@pytest.fixture
def app(db):
    return create_app("test")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def manager(app) -> SessionManager:
    return app.extensions["session_manager"]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_manager(db):
    def _make(clock=None, **settings) -> SessionManager:
        return SessionManager(
            fast_settings(**settings),
            UserDirectory(db),
            RefreshTokenLedger(db),
            db,
            clock=clock,
        )

    return _make


@pytest.fixture
def signup(client):
    """POST /auth/signup and return the JSON body."""

    def _signup(email="user@example.com", password=PASSWORD, name="User"):
        resp = client.post(
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "name": name},
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _signup


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
