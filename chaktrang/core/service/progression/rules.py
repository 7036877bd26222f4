"""
Progression rules: how one game result changes an account's numbers.

Pure functions only; persistence and retries live in ProgressionLedger.
"""

from chaktrang.core.exceptions.base import InvalidOutcomeError
from chaktrang.core.service.account.models.account import BALANCE_LIMIT, ProgressionState
from chaktrang.core.service.progression.models import GameOutcome, GameResult

MAX_LEVEL = 50
MAX_REWARD_PER_GAME = 1_000_000

EXPERIENCE_REWARDS = {
    GameOutcome.WIN: 100,
    GameOutcome.LOSS: 25,
    GameOutcome.DRAW: 50,
}

_COUNTERS = {
    GameOutcome.WIN: "total_wins",
    GameOutcome.LOSS: "total_losses",
    GameOutcome.DRAW: "total_draws",
}


def validate_result(
    result: GameResult,
    max_level: int = MAX_LEVEL,
    max_reward: int = MAX_REWARD_PER_GAME
) -> None:
    earned = {"coins_earned": result.coins_earned, "diamonds_earned": result.diamonds_earned}
    if result.coins_earned < 0 or result.diamonds_earned < 0:
        raise InvalidOutcomeError("Earned amounts cannot be negative", details=earned)
    if result.coins_earned > max_reward or result.diamonds_earned > max_reward:
        raise InvalidOutcomeError(
            f"Earned amounts cannot exceed {max_reward} per game",
            details=earned
        )
    if not 1 <= result.level_played <= max_level:
        raise InvalidOutcomeError(
            f"Level played must be between 1 and {max_level}",
            details={"level_played": result.level_played}
        )


def _add_balance(balance: int, earned: int) -> int:
    return min(BALANCE_LIMIT, max(0, balance + earned))


def apply_game_result(
    state: ProgressionState,
    result: GameResult,
    max_level: int = MAX_LEVEL,
    max_reward: int = MAX_REWARD_PER_GAME
) -> ProgressionState:
    """Return the progression after `result`; `state` is left untouched."""
    validate_result(result, max_level, max_reward)

    values = state.model_dump()
    counter = _COUNTERS[result.outcome]
    values[counter] += 1
    values["games_played"] += 1
    values["experience_points"] += EXPERIENCE_REWARDS[result.outcome]
    values["coins"] = _add_balance(values["coins"], result.coins_earned)
    values["diamonds"] = _add_balance(values["diamonds"], result.diamonds_earned)

    if result.outcome == GameOutcome.WIN:
        values["win_streak"] += 1
        # Only a win at the frontier level unlocks the next one
        if result.level_played == values["current_level"] and values["current_level"] < max_level:
            values["current_level"] += 1
        values["highest_level"] = max(values["highest_level"], result.level_played)
    elif result.outcome == GameOutcome.LOSS:
        values["win_streak"] = 0
    # A draw leaves the streak as it was

    values["current_level"] = min(values["current_level"], max_level)
    values["highest_level"] = max(values["highest_level"], values["current_level"])
    return ProgressionState(**values)
