"""
In-process account store, used for tests and single-process development.
"""

import asyncio
from typing import Any, Dict, List, Optional

from chaktrang.core.exceptions.base import DuplicateEmailError, DuplicateUsernameError
from chaktrang.core.logger.logger import get_logger
from chaktrang.core.service.account.models.account import (
    Account, GuildSummary, LeaderboardEntry, ProgressionState, rank_accounts, summarize_guilds
)
from chaktrang.core.service.account.store import (
    AccountStore, check_lookup_field, check_updatable_fields
)

logger = get_logger(__name__)


class InMemoryAccountStore(AccountStore):
    """Dictionary-backed store; a single lock serializes every write"""

    backend_name = "memory"

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._lock = asyncio.Lock()

    async def ping(self) -> bool:
        return True

    async def insert_unique(self, account: Account) -> Account:
        async with self._lock:
            for existing in self._accounts.values():
                if existing.username == account.username:
                    raise DuplicateUsernameError(account.username)
                if existing.email == account.email:
                    raise DuplicateEmailError(account.email)
            self._accounts[account.id] = account.model_copy()
            logger.debug("Account inserted", extra={"account_id": account.id, "backend": self.backend_name})
            return account.model_copy()

    async def find_one(self, field: str, value: str) -> Optional[Account]:
        check_lookup_field(field)
        if field == "id":
            account = self._accounts.get(value)
            return account.model_copy() if account else None
        for account in self._accounts.values():
            if getattr(account, field) == value:
                return account.model_copy()
        return None

    async def update_fields(self, account_id: str, fields: Dict[str, Any]) -> Optional[Account]:
        check_updatable_fields(fields)
        async with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None
            updated = account.model_copy(update=fields)
            self._accounts[account_id] = updated
            return updated.model_copy()

    async def compare_and_swap_progression(
        self,
        account_id: str,
        expected: ProgressionState,
        new: ProgressionState
    ) -> bool:
        async with self._lock:
            account = self._accounts.get(account_id)
            if account is None or account.progression() != expected:
                return False
            self._accounts[account_id] = account.with_progression(new)
            return True

    async def top_accounts(self, limit: int) -> List[LeaderboardEntry]:
        return rank_accounts(list(self._accounts.values()), limit)

    async def guild_summaries(self) -> List[GuildSummary]:
        return summarize_guilds(list(self._accounts.values()))
