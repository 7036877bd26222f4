from typing import Optional

from chaktrang.core.exceptions.base import InvalidCredentialsError
from chaktrang.core.logger.logger import get_logger
from chaktrang.core.service.account.directory import AccountDirectory
from chaktrang.core.service.auth.jwt_service import SessionIssuer
from chaktrang.core.service.auth.models.token import AuthResult
from chaktrang.core.service.auth.password_service import PasswordService

logger = get_logger(__name__)


class AuthService:
    """Registration and login on top of the directory, password hashing and token issuing"""

    def __init__(
        self,
        directory: AccountDirectory,
        passwords: PasswordService,
        sessions: SessionIssuer
    ):
        self.directory = directory
        self.passwords = passwords
        self.sessions = sessions

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        display_name: Optional[str] = None
    ) -> AuthResult:
        account = await self.directory.create(
            username=username,
            email=email,
            password_hash=self.passwords.hash(password),
            display_name=display_name
        )
        token = self.sessions.issue(account.id, account.email)

        logger.info(
            "Account registered",
            extra={"account_id": account.id, "username": account.username}
        )
        return AuthResult(token=token, account=account)

    async def login(
        self,
        password: str,
        email: Optional[str] = None,
        username: Optional[str] = None
    ) -> AuthResult:
        """
        Authenticate by email or username.
        Unknown identity and wrong password both raise InvalidCredentialsError.
        """
        if email:
            account = await self.directory.find_by_email(email)
        elif username:
            account = await self.directory.find_by_username(username)
        else:
            account = None

        if not self.passwords.verify(password, account.password_hash if account else None):
            logger.warning("Login failed", extra={"identity": email or username})
            raise InvalidCredentialsError()

        account = await self.directory.record_login(account.id)
        token = self.sessions.issue(account.id, account.email)

        logger.info("Login succeeded", extra={"account_id": account.id})
        return AuthResult(token=token, account=account)
