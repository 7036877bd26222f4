from datetime import datetime

from pydantic import BaseModel, Field

from chaktrang.core.service.account.models.account import Account


class TokenPayload(BaseModel):
    """JWT token payload structure"""
    sub: str = Field(..., description="Account id the token was issued to")
    email: str = Field(..., description="Account email at issuance")
    iat: datetime = Field(..., description="Token issued at timestamp")
    exp: datetime = Field(..., description="Token expiration timestamp")

    @property
    def account_id(self) -> str:
        return self.sub


class IssuedToken(BaseModel):
    token: str
    expires_at: datetime


class AuthResult(BaseModel):
    """Result of a successful register or login"""
    token: IssuedToken
    account: Account
