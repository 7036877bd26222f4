"""
Authentication controller: registration, login and session inspection.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends, status

from chaktrang.api.controller.auth.dto.input_dto import LoginRequestDto, RegisterRequestDto
from chaktrang.api.controller.auth.dto.output_dto import AuthResponseDto, SessionStatusResponseDto
from chaktrang.api.middleware.authentication.jwt_bearer import require_session
from chaktrang.core.dependencies import get_auth_service
from chaktrang.core.service.auth.auth_service import AuthService
from chaktrang.core.service.auth.models.token import TokenPayload
from chaktrang.core.logger.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponseDto, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequestDto,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Create a new account and return a session token.

    New accounts start at level 1 with 1000 coins and 10 diamonds.
    Fails with DUPLICATE_USERNAME or DUPLICATE_EMAIL (409) if either is taken.
    """
    result = await auth_service.register(
        username=request.username,
        email=request.email,
        password=request.password,
        display_name=request.display_name
    )
    return AuthResponseDto.from_result(result)


@router.post("/login", response_model=AuthResponseDto)
async def login(
    request: LoginRequestDto,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Authenticate by email (or username) and password.

    Unknown accounts and wrong passwords both answer INVALID_CREDENTIALS.
    """
    result = await auth_service.login(
        password=request.password,
        email=request.email,
        username=request.username
    )
    return AuthResponseDto.from_result(result)


@router.get("/session", response_model=SessionStatusResponseDto)
async def session_status(payload: TokenPayload = Depends(require_session)):
    """Report the identity and remaining lifetime of the presented token."""
    remaining = int((payload.exp - datetime.now(timezone.utc)).total_seconds())
    return SessionStatusResponseDto(
        valid=True,
        user_id=payload.sub,
        email=payload.email,
        expires_at=payload.exp,
        remaining_seconds=max(0, remaining)
    )
