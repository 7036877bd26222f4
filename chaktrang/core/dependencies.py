"""
FastAPI dependency injection functions.
The store and session issuer are created once per application and kept on app.state.
"""

from functools import lru_cache
from fastapi import Depends, Request

from chaktrang.core.service.account.directory import AccountDirectory
from chaktrang.core.service.account.store import AccountStore
from chaktrang.core.service.auth.auth_service import AuthService
from chaktrang.core.service.auth.jwt_service import SessionIssuer
from chaktrang.core.service.auth.password_service import PasswordService
from chaktrang.core.service.progression.ledger import ProgressionLedger


def get_account_store(request: Request) -> AccountStore:
    """Get the account store configured at startup."""
    return request.app.state.account_store


def get_session_issuer(request: Request) -> SessionIssuer:
    """Get the process-wide session issuer."""
    return request.app.state.session_issuer


@lru_cache()
def get_password_service() -> PasswordService:
    """Get the shared password hasher."""
    return PasswordService()


def get_account_directory(store: AccountStore = Depends(get_account_store)) -> AccountDirectory:
    return AccountDirectory(store)


def get_auth_service(
    directory: AccountDirectory = Depends(get_account_directory),
    passwords: PasswordService = Depends(get_password_service),
    sessions: SessionIssuer = Depends(get_session_issuer)
) -> AuthService:
    """Get auth service with its collaborators."""
    return AuthService(directory, passwords, sessions)


def get_progression_ledger(directory: AccountDirectory = Depends(get_account_directory)) -> ProgressionLedger:
    return ProgressionLedger(directory)
