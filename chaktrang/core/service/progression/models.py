from enum import Enum

from pydantic import BaseModel


class GameOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


class GameResult(BaseModel):
    """One finished game as reported by the client; validated by the ledger, not here"""
    outcome: GameOutcome
    level_played: int
    coins_earned: int = 0
    diamonds_earned: int = 0
