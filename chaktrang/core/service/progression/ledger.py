from typing import Optional, Union

from pydantic import ValidationError

from chaktrang.core.exceptions.base import ConcurrentUpdateError, InvalidOutcomeError, NotFoundError
from chaktrang.core.logger.logger import get_logger
from chaktrang.core.service.account.directory import AccountDirectory
from chaktrang.core.service.account.models.account import Account
from chaktrang.core.service.progression.models import GameOutcome, GameResult
from chaktrang.core.service.progression.rules import apply_game_result, validate_result
from chaktrang.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


class ProgressionLedger:
    """
    Applies game results to account progression.

    Each result is validated, then written with a compare-and-swap on the full
    progression tuple; a lost race re-reads the account and re-applies the
    result, so concurrent submissions for one account never lose an update.
    Duplicate submissions of the same game are counted twice.
    """

    def __init__(
        self,
        directory: AccountDirectory,
        max_retries: Optional[int] = None,
        max_level: Optional[int] = None,
        max_reward: Optional[int] = None
    ):
        self.directory = directory
        self.store = directory.store
        self.max_retries = max_retries or settings.LEDGER_MAX_RETRIES
        self.max_level = max_level or settings.MAX_LEVEL
        self.max_reward = max_reward or settings.MAX_REWARD_PER_GAME

    async def apply_result(
        self,
        account_id: str,
        outcome: Union[GameOutcome, str],
        level_played: int,
        coins_earned: int = 0,
        diamonds_earned: int = 0
    ) -> Account:
        """
        Apply one game result. Values are checked here rather than trusted from
        the caller, so a malformed result of any shape raises InvalidOutcomeError.
        """
        try:
            result = GameResult(
                outcome=outcome,
                level_played=level_played,
                coins_earned=coins_earned,
                diamonds_earned=diamonds_earned
            )
        except ValidationError as e:
            raise InvalidOutcomeError(
                "Malformed game result",
                details={"errors": [error["msg"] for error in e.errors()]}
            ) from e
        validate_result(result, self.max_level, self.max_reward)

        for attempt in range(1, self.max_retries + 1):
            account = await self.directory.find_by_id(account_id)
            if account is None:
                raise NotFoundError(context={"account_id": account_id})

            current = account.progression()
            updated = apply_game_result(current, result, self.max_level, self.max_reward)

            if await self.store.compare_and_swap_progression(account_id, current, updated):
                logger.info(
                    "Game result applied",
                    extra={
                        "account_id": account_id,
                        "outcome": result.outcome.value,
                        "level_played": result.level_played,
                        "current_level": updated.current_level,
                        "attempt": attempt
                    }
                )
                return account.with_progression(updated)

            logger.debug(
                "Progression changed concurrently, retrying",
                extra={"account_id": account_id, "attempt": attempt}
            )

        logger.warning(
            "Giving up on game result after repeated conflicts",
            extra={"account_id": account_id, "attempts": self.max_retries}
        )
        raise ConcurrentUpdateError(account_id, self.max_retries)
