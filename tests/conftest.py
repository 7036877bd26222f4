"""
Shared test configuration and fixtures.
"""

import uuid
from typing import AsyncGenerator

import pytest
from fastapi.testclient import TestClient

from chaktrang.app import create_app
from chaktrang.core.dependencies import get_password_service
from chaktrang.core.service.account.directory import AccountDirectory
from chaktrang.core.service.auth.auth_service import AuthService
from chaktrang.core.service.auth.jwt_service import SessionIssuer
from chaktrang.core.service.auth.password_service import PasswordService
from chaktrang.core.service.progression.ledger import ProgressionLedger
from chaktrang.infra.database import DatabaseManager
from chaktrang.infra.repository.memory_account_store import InMemoryAccountStore
from chaktrang.infra.repository.sql_account_store import SQLAccountStore

TEST_SECRET_KEY = "test-signing-key-with-enough-bytes-for-hs256"

# bcrypt's minimum cost keeps the suite fast
_fast_passwords = PasswordService(rounds=4)


@pytest.fixture
def password_service() -> PasswordService:
    return _fast_passwords


@pytest.fixture
def session_issuer() -> SessionIssuer:
    return SessionIssuer(secret_key=TEST_SECRET_KEY)


@pytest.fixture
def memory_store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
async def sql_store(tmp_path) -> AsyncGenerator[SQLAccountStore, None]:
    store = SQLAccountStore(DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}"))
    await store.connect()
    try:
        yield store
    finally:
        await store.close()


@pytest.fixture(params=["memory", "sql"])
async def any_store(request, tmp_path):
    """Runs a test against every store that needs no external server."""
    if request.param == "memory":
        yield InMemoryAccountStore()
        return
    store = SQLAccountStore(DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}"))
    await store.connect()
    try:
        yield store
    finally:
        await store.close()


@pytest.fixture
def directory(memory_store) -> AccountDirectory:
    return AccountDirectory(memory_store)


@pytest.fixture
def ledger(directory) -> ProgressionLedger:
    return ProgressionLedger(directory)


@pytest.fixture
def auth_service(directory, password_service, session_issuer) -> AuthService:
    return AuthService(directory, password_service, session_issuer)


@pytest.fixture
def app(memory_store, session_issuer):
    app = create_app(account_store=memory_store, session_issuer=session_issuer)
    app.dependency_overrides[get_password_service] = lambda: _fast_passwords
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def new_player():
    """Factory for unique registration payloads."""
    def _make(prefix: str = "player") -> dict:
        suffix = uuid.uuid4().hex[:8]
        return {
            "username": f"{prefix}_{suffix}",
            "email": f"{prefix}_{suffix}@example.com",
            "password": "s3cret-pass",
        }
    return _make


@pytest.fixture
def register(client, new_player):
    """Factory registering a player through the API; returns (token, user, credentials)."""
    def _register(prefix: str = "player"):
        credentials = new_player(prefix)
        response = client.post("/api/auth/register", json=credentials)
        assert response.status_code == 201, response.text
        data = response.json()
        return data["token"], data["user"], credentials
    return _register
