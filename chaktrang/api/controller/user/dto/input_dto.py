"""
Input DTOs for account endpoints. Keys are accepted in camelCase or snake_case.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ProfileUpdateRequestDto(BaseModel):
    """Editable profile fields. Anything else in the body is ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    display_name: Optional[str] = Field(None, min_length=1, max_length=64)
    avatar_url: Optional[str] = Field(None, min_length=1, max_length=255)
    country: Optional[str] = Field(None, min_length=1, max_length=64)
    guild_name: Optional[str] = Field(None, max_length=64)

    @field_validator('display_name', 'avatar_url', 'country', 'guild_name', mode='before')
    @classmethod
    def strip_text(cls, v):
        # Runs before the length checks so whitespace-only names are rejected
        return v.strip() if isinstance(v, str) else v


class GameResultRequestDto(BaseModel):
    """
    A finished game, taken as sent. Every check (outcome, level bounds,
    reward amounts, types) is made by the ledger, so any malformed result
    reports INVALID_OUTCOME rather than a generic validation error.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    outcome: Any = Field(None, description="win, loss or draw")
    level_played: Any = Field(None, description="Level the game was played at")
    coins_earned: Any = Field(0, description="Coins awarded by the client")
    diamonds_earned: Any = Field(0, description="Diamonds awarded by the client")

    @field_validator('outcome')
    @classmethod
    def normalize_outcome(cls, v):
        return v.strip().lower() if isinstance(v, str) else v
