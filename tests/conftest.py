from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.app.main import create_app
from src.core.auth import AuthService
from src.core.config import AppConfig
from src.db.models import Base
from src.db.session import build_engine, build_session_factory


@pytest.fixture()
def config() -> AppConfig:
    return AppConfig(
        database_url="sqlite:///:memory:",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        default_categories=["Food", "Transport"],
    )


@pytest.fixture()
def auth(config) -> AuthService:
    return AuthService(config)


@pytest.fixture()
def session(config) -> Session:
    engine = build_engine(config)
    Base.metadata.create_all(bind=engine)
    SessionLocal = build_session_factory(engine)
    with SessionLocal() as s:
        yield s


@pytest.fixture()
def app(config):
    return create_app(config)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def login():
    def _login(client: TestClient, username: str, password: str = "pw1") -> None:
        r = client.post("/signup", data={"username": username, "password": password}, follow_redirects=False)
        assert r.status_code == 303
        r = client.post("/login", data={"username": username, "password": password}, follow_redirects=False)
        assert r.status_code == 303

    return _login


@pytest.fixture()
def category_id():
    def _lookup(client: TestClient, name: str = "Food") -> int:
        cats = client.get("/api/categories").json()
        return next(c["id"] for c in cats if c["name"] == name)

    return _lookup
