"""Shared test helpers: in-memory database, fixture settings and an API client with overrides."""

import tempfile
from typing import Any

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from accounts_api.core.config import Settings, get_settings
from accounts_api.core.database import get_db
from accounts_api.models import Base, User
from accounts_api.services.credentials import create_user

API_USERS = "/api/v1/users"


def make_settings(**overrides: Any) -> Settings:
    """Settings with fixture secrets, the lowest allowed bcrypt cost and a private upload dir."""
    values: dict[str, Any] = {
        "DATABASE_URL": "sqlite://",
        "ACCESS_TOKEN_SECRET": "test-access-secret",
        "REFRESH_TOKEN_SECRET": "test-refresh-secret",
        "BCRYPT_ROUNDS": 10,
        "COOKIE_SECURE": False,
        "UPLOAD_TMP_DIR": tempfile.mkdtemp(prefix="accounts-test-uploads-"),
    }
    values.update(overrides)
    return Settings(**values)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database shared across threads (TestClient runs sync routes in a pool)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_user(
    db: Session,
    settings: Settings,
    username: str = "alice01",
    email: str = "alice@x.com",
    fullname: str = "Alice Doe",
    password: str = "correct-horse-1",
) -> User:
    return create_user(db, username, email, fullname, password, settings)


def make_client(settings: Settings, session_factory: sessionmaker) -> TestClient:
    """TestClient whose get_db and get_settings dependencies use the fixtures."""
    from accounts_api.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


def clear_overrides() -> None:
    from accounts_api.main import app

    app.dependency_overrides.clear()
