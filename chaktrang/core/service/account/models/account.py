"""
Account model for persistent storage
"""

from datetime import datetime, timezone
from typing import List
from uuid import uuid4

from pydantic import BaseModel, Field

# Largest value a 32-bit INTEGER balance column holds
BALANCE_LIMIT = 2_147_483_647
DEFAULT_RATING = 1200


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressionState(BaseModel):
    """The mutable numeric part of an account, updated only by the ledger."""
    coins: int = Field(default=1000, ge=0)
    diamonds: int = Field(default=10, ge=0)
    current_level: int = Field(default=1, ge=1)
    highest_level: int = Field(default=1, ge=1)
    total_wins: int = Field(default=0, ge=0)
    total_losses: int = Field(default=0, ge=0)
    total_draws: int = Field(default=0, ge=0)
    experience_points: int = Field(default=0, ge=0)
    games_played: int = Field(default=0, ge=0)
    win_streak: int = Field(default=0, ge=0)

    @property
    def win_rate(self) -> float:
        """Percentage of played games that were won, one decimal"""
        if not self.games_played:
            return 0.0
        return round(self.total_wins * 100 / self.games_played, 1)


PROGRESSION_FIELDS = tuple(ProgressionState.model_fields)


class Account(ProgressionState):
    """Account database model, password hash included"""
    id: str = Field(default_factory=lambda: str(uuid4()))
    username: str
    email: str
    password_hash: str
    display_name: str
    avatar_url: str = "default_avatar"
    country: str = "Cambodia"
    guild_name: str = ""
    # Granted out of band; no client endpoint writes these
    rating: int = DEFAULT_RATING
    is_developer: bool = False
    is_premium: bool = False
    achievements: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    last_login_at: datetime = Field(default_factory=utcnow)

    def progression(self) -> ProgressionState:
        return ProgressionState(**self.model_dump(include=set(PROGRESSION_FIELDS)))

    def with_progression(self, state: ProgressionState) -> "Account":
        return self.model_copy(update=state.model_dump())

    def public_view(self) -> dict:
        """Every field except the password hash"""
        return self.model_dump(exclude={"password_hash"})


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    username: str
    display_name: str
    highest_level: int
    total_wins: int
    experience_points: int
    guild_name: str = ""


class GuildSummary(BaseModel):
    guild_name: str
    member_count: int


def leaderboard_sort_key(account: Account) -> tuple:
    return (-account.highest_level, -account.total_wins, -account.experience_points, account.username)


def rank_accounts(accounts: list, limit: int) -> list:
    """Order accounts for the leaderboard; shared by stores that sort in process."""
    ordered = sorted(accounts, key=leaderboard_sort_key)[:limit]
    return [
        LeaderboardEntry(
            rank=position,
            user_id=account.id,
            username=account.username,
            display_name=account.display_name,
            highest_level=account.highest_level,
            total_wins=account.total_wins,
            experience_points=account.experience_points,
            guild_name=account.guild_name,
        )
        for position, account in enumerate(ordered, start=1)
    ]


def summarize_guilds(accounts: list) -> list:
    counts = {}
    for account in accounts:
        if account.guild_name:
            counts[account.guild_name] = counts.get(account.guild_name, 0) + 1
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [GuildSummary(guild_name=name, member_count=count) for name, count in ordered]

