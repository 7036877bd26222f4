from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError as JWTInvalidTokenError
from pydantic import ValidationError

from chaktrang.core.exceptions.base import InvalidTokenError, TokenExpiredError
from chaktrang.core.logger.logger import get_logger
from chaktrang.core.service.auth.models.token import IssuedToken, TokenPayload
from chaktrang.infra.config.settings import DEFAULT_JWT_SECRET_KEY, get_settings

logger = get_logger(__name__)
settings = get_settings()

REQUIRED_CLAIMS = ["sub", "email", "iat", "exp"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionIssuer:
    """Issues and validates stateless, signed session tokens (JWT)"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = _utcnow
    ):
        self.secret_key = secret_key or settings.JWT_SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.ttl = ttl or timedelta(days=settings.TOKEN_EXPIRE_DAYS)
        self.clock = clock

    @property
    def uses_default_key(self) -> bool:
        return self.secret_key == DEFAULT_JWT_SECRET_KEY

    def issue(self, account_id: str, email: str) -> IssuedToken:
        """
        Create a signed token for the account.
        Timestamps are truncated to whole seconds so the token is a pure
        function of (account id, email, issuance second, key).
        """
        issued_at = self.clock().replace(microsecond=0)
        expires_at = issued_at + self.ttl

        payload = TokenPayload(sub=account_id, email=email, iat=issued_at, exp=expires_at)
        token = jwt.encode(payload.model_dump(), self.secret_key, algorithm=self.algorithm)

        return IssuedToken(token=token, expires_at=expires_at)

    def validate(self, token: str) -> TokenPayload:
        """
        Verify signature and expiry and return the payload.
        Raises TokenExpiredError or InvalidTokenError; never returns a partially trusted payload.
        """
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS}
            )
            payload = TokenPayload(**claims)

        except ExpiredSignatureError:
            logger.info("Token expired")
            raise TokenExpiredError()

        except (JWTInvalidTokenError, ValidationError) as e:
            logger.warning(
                "Invalid token",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            raise InvalidTokenError()

        # The injected clock may run ahead of the wall clock pyjwt checks against
        if self.clock() >= payload.exp:
            logger.info("Token expired", extra={"account_id": payload.sub})
            raise TokenExpiredError()

        return payload
