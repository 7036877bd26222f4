"""
Output DTOs for account endpoints.

Account payloads are serialized in camelCase, the shape the game client reads.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chaktrang.core.service.account.models.account import Account, GuildSummary, LeaderboardEntry


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AccountResponseDto(CamelModel):
    """Public account snapshot; never carries the password hash."""

    user_id: str = Field(..., description="Account id")
    username: str
    email: str
    display_name: str
    avatar_url: str
    country: str
    guild_name: str
    coins: int
    diamonds: int
    current_level: int
    highest_level: int
    total_wins: int
    total_losses: int
    total_draws: int
    experience_points: int
    games_played: int
    win_streak: int
    win_rate: float = Field(..., description="Percentage of games won")
    rating: int
    is_developer: bool
    is_premium: bool
    achievements: List[str]
    created_at: datetime
    last_login_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponseDto":
        data = account.public_view()
        data["user_id"] = data.pop("id")
        data["win_rate"] = account.win_rate
        return cls(**data)


class LeaderboardEntryDto(CamelModel):
    rank: int
    user_id: str
    username: str
    display_name: str
    highest_level: int
    total_wins: int
    experience_points: int
    guild_name: str

    @classmethod
    def from_entry(cls, entry: LeaderboardEntry) -> "LeaderboardEntryDto":
        return cls(**entry.model_dump())


class LeaderboardResponseDto(CamelModel):
    entries: List[LeaderboardEntryDto] = Field(default_factory=list)


class GuildDto(CamelModel):
    guild_name: str
    member_count: int

    @classmethod
    def from_summary(cls, summary: GuildSummary) -> "GuildDto":
        return cls(**summary.model_dump())


class GuildListResponseDto(CamelModel):
    guilds: List[GuildDto] = Field(default_factory=list)


class ProtectedResponseDto(BaseModel):
    message: str = "Protected data"
    user: dict
