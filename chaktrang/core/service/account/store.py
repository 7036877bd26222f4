"""
Storage abstraction the account directory and ledger are written against.

Implementations live in chaktrang.infra.repository and must provide:
- unique enforcement of username and email at insert time, surfaced as
  DuplicateUsernameError / DuplicateEmailError even when two registrations race;
- compare-and-swap on the full progression tuple, so concurrent game results
  for one account never lose an update;
- StorageUnavailableError whenever the backend cannot be reached.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from chaktrang.core.service.account.models.account import (
    Account, GuildSummary, LeaderboardEntry, ProgressionState
)

LOOKUP_FIELDS = ("id", "username", "email")
UPDATABLE_FIELDS = ("display_name", "avatar_url", "country", "guild_name", "last_login_at")


class AccountStore(ABC):
    """Record store holding one document/row per account"""

    backend_name = "abstract"

    async def connect(self) -> None:
        """Open connections / create schema. Default: nothing to do."""

    async def close(self) -> None:
        """Release connections. Default: nothing to do."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True if the backend answers, raise StorageUnavailableError otherwise."""

    @abstractmethod
    async def insert_unique(self, account: Account) -> Account:
        """Insert a new account, failing on username/email collisions."""

    @abstractmethod
    async def find_one(self, field: str, value: str) -> Optional[Account]:
        """Look up by one of LOOKUP_FIELDS."""

    @abstractmethod
    async def update_fields(self, account_id: str, fields: Dict[str, Any]) -> Optional[Account]:
        """Overwrite the given non-progression fields; None if the account is missing."""

    @abstractmethod
    async def compare_and_swap_progression(
        self,
        account_id: str,
        expected: ProgressionState,
        new: ProgressionState
    ) -> bool:
        """Write `new` only if the stored progression still equals `expected`."""

    @abstractmethod
    async def top_accounts(self, limit: int) -> List[LeaderboardEntry]:
        """Accounts ranked by highest level, wins, then experience."""

    @abstractmethod
    async def guild_summaries(self) -> List[GuildSummary]:
        """Non-empty guild names with their member counts."""


def check_lookup_field(field: str) -> None:
    if field not in LOOKUP_FIELDS:
        raise ValueError(f"Unsupported lookup field: {field}")


def check_updatable_fields(fields: Dict[str, Any]) -> None:
    rejected = set(fields) - set(UPDATABLE_FIELDS)
    if rejected:
        raise ValueError(f"Fields cannot be updated through update_fields: {sorted(rejected)}")
