"""
Account controller: profile read/update and game result submission.
"""

from fastapi import APIRouter, Depends

from chaktrang.api.controller.user.dto.input_dto import GameResultRequestDto, ProfileUpdateRequestDto
from chaktrang.api.controller.user.dto.output_dto import AccountResponseDto, ProtectedResponseDto
from chaktrang.api.middleware.authentication.jwt_bearer import require_session
from chaktrang.core.dependencies import get_account_directory, get_progression_ledger
from chaktrang.core.exceptions.base import ForbiddenError
from chaktrang.core.service.account.directory import AccountDirectory
from chaktrang.core.service.auth.models.token import TokenPayload
from chaktrang.core.service.progression.ledger import ProgressionLedger
from chaktrang.core.logger.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/user", tags=["User"])


@router.get("/profile/{user_id}", response_model=AccountResponseDto)
async def get_profile(
    user_id: str,
    directory: AccountDirectory = Depends(get_account_directory)
):
    """Public profile of any account."""
    account = await directory.get(user_id)
    return AccountResponseDto.from_account(account)


@router.put("/update/{user_id}", response_model=AccountResponseDto)
async def update_profile(
    user_id: str,
    request: ProfileUpdateRequestDto,
    payload: TokenPayload = Depends(require_session),
    directory: AccountDirectory = Depends(get_account_directory)
):
    """
    Update display name, avatar, country or guild of the caller's own account.
    Any other key in the body is ignored.
    """
    if payload.sub != user_id:
        logger.warning(
            "Profile update for another account rejected",
            extra={"account_id": payload.sub, "target_account_id": user_id}
        )
        raise ForbiddenError()

    account = await directory.update_profile(user_id, request.model_dump(exclude_unset=True))
    return AccountResponseDto.from_account(account)


@router.post("/game-result", response_model=AccountResponseDto)
async def submit_game_result(
    request: GameResultRequestDto,
    payload: TokenPayload = Depends(require_session),
    ledger: ProgressionLedger = Depends(get_progression_ledger)
):
    """
    Record one finished game for the caller.

    Each call counts as one game; resubmitting the same game counts it again.
    """
    account = await ledger.apply_result(
        account_id=payload.sub,
        outcome=request.outcome,
        level_played=request.level_played,
        coins_earned=request.coins_earned,
        diamonds_earned=request.diamonds_earned
    )
    return AccountResponseDto.from_account(account)


@router.get("/protected", response_model=ProtectedResponseDto)
async def protected_route(payload: TokenPayload = Depends(require_session)):
    """Echo the claims of a valid token."""
    logger.info("Authenticated access to protected endpoint", extra={"account_id": payload.sub})
    return ProtectedResponseDto(user=payload.model_dump(mode="json"))
