from typing import Optional

from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chaktrang.core.exceptions.base import InvalidTokenError
from chaktrang.core.service.auth.models.token import TokenPayload
from chaktrang.core.logger.logger import get_logger

logger = get_logger(__name__)


class SessionBearer(HTTPBearer):
    """Resolves `Authorization: Bearer <token>` into a validated TokenPayload."""

    def __init__(self):
        super().__init__(auto_error=False)

    async def __call__(self, request: Request) -> TokenPayload:
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)
        if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
            logger.warning("Missing or malformed authorization header", extra={"path": request.url.path})
            raise InvalidTokenError("No token provided")

        return request.app.state.session_issuer.validate(credentials.credentials)


require_session = SessionBearer()
