"""
Output DTOs for authentication API endpoints.
"""

from datetime import datetime

from pydantic import Field

from chaktrang.api.controller.user.dto.output_dto import AccountResponseDto, CamelModel
from chaktrang.core.service.auth.models.token import AuthResult


class AuthResponseDto(CamelModel):
    """DTO for successful register/login response."""

    token: str = Field(..., description="Signed session token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., description="Token expiration time")
    user: AccountResponseDto = Field(..., description="Account snapshot")

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponseDto":
        return cls(
            token=result.token.token,
            expires_at=result.token.expires_at,
            user=AccountResponseDto.from_account(result.account)
        )


class SessionStatusResponseDto(CamelModel):
    """DTO for session status response."""

    valid: bool = Field(..., description="Whether the session is valid")
    user_id: str = Field(..., description="Authenticated account id")
    email: str = Field(..., description="Email the token was issued for")
    expires_at: datetime = Field(..., description="Token expiration time")
    remaining_seconds: int = Field(..., description="Remaining token validity in seconds")
