from collections.abc import Generator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from newsletter_service.adapters.auth.crypto import Argon2AuthAdapter
from newsletter_service.adapters.dev_email import DevEmailAdapter
from newsletter_service.adapters.sqlite.migrator import SQLiteMigrator
from newsletter_service.adapters.sqlite_db import SQLiteConnectionPool, SQLiteUserRepo
from newsletter_service.api.main import create_app
from newsletter_service.config import (
    ApplicationSettings,
    DatabaseSettings,
    EmailClientSettings,
    Settings,
)

OPERATOR_USERNAME = "operator"
OPERATOR_PASSWORD = "everything-has-its-price"


@pytest.fixture
def db_path(tmp_path) -> str:
    """A migrated, empty database file."""
    path = str(tmp_path / "newsletter.db")
    pool = SQLiteConnectionPool(path, max_connections=1)
    SQLiteMigrator(pool).run_migrations()
    pool.close()
    return path


@pytest.fixture
def pool(db_path: str) -> Generator[SQLiteConnectionPool, None, None]:
    pool = SQLiteConnectionPool(db_path, max_connections=2, acquire_timeout=0.5)
    yield pool
    pool.close()


@pytest.fixture
def settings(db_path: str) -> Settings:
    return Settings(
        environment="local",
        application=ApplicationSettings(
            base_url="http://127.0.0.1:8000",
            session_secret=SecretStr("test-session-secret"),
        ),
        database=DatabaseSettings(path=db_path, run_migrations=False),
        email_client=EmailClientSettings(backend="dev"),
    )


@pytest.fixture
def email_adapter() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def operator(pool: SQLiteConnectionPool) -> tuple[str, str]:
    """Store an operator account and return its (username, password)."""
    password_hash = Argon2AuthAdapter().hash_password(SecretStr(OPERATOR_PASSWORD))
    SQLiteUserRepo(pool).add_user(uuid4(), OPERATOR_USERNAME, password_hash)
    return OPERATOR_USERNAME, OPERATOR_PASSWORD


@pytest.fixture
def client(
    settings: Settings, email_adapter: DevEmailAdapter
) -> Generator[TestClient, None, None]:
    """TestClient over a temporary database; outbound emails land in `email_adapter`."""
    app = create_app(settings)
    app.state.email_sender = email_adapter
    with TestClient(app) as test_client:
        yield test_client
