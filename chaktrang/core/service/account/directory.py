from typing import Any, Dict, List, Optional

from chaktrang.core.exceptions.base import NotFoundError
from chaktrang.core.logger.logger import get_logger
from chaktrang.core.service.account.models.account import (
    Account, GuildSummary, LeaderboardEntry, utcnow
)
from chaktrang.core.service.account.store import AccountStore
from chaktrang.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()

# The only fields a client may change on its own profile
MUTABLE_PROFILE_FIELDS = ("display_name", "avatar_url", "country", "guild_name")


def normalize_email(email: str) -> str:
    """Emails are stored and looked up lower-cased"""
    return email.strip().lower()


class AccountDirectory:
    """Maps usernames, emails and ids to account records"""

    def __init__(self, store: AccountStore):
        self.store = store

    async def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        display_name: Optional[str] = None
    ) -> Account:
        """
        Insert a fresh account with starting balances.
        Raises DuplicateUsernameError / DuplicateEmailError from the store.
        """
        account = Account(
            username=username,
            email=normalize_email(email),
            password_hash=password_hash,
            display_name=display_name or username,
            coins=settings.STARTING_COINS,
            diamonds=settings.STARTING_DIAMONDS
        )
        return await self.store.insert_unique(account)

    async def find_by_id(self, account_id: str) -> Optional[Account]:
        return await self.store.find_one("id", account_id)

    async def find_by_username(self, username: str) -> Optional[Account]:
        return await self.store.find_one("username", username)

    async def find_by_email(self, email: str) -> Optional[Account]:
        return await self.store.find_one("email", normalize_email(email))

    async def get(self, account_id: str) -> Account:
        account = await self.find_by_id(account_id)
        if account is None:
            raise NotFoundError(context={"account_id": account_id})
        return account

    async def update_profile(self, account_id: str, fields: Dict[str, Any]) -> Account:
        """
        Apply profile changes from the allow-list; every other key is dropped.
        Values of None mean "leave unchanged".
        """
        allowed = {
            key: value for key, value in fields.items()
            if key in MUTABLE_PROFILE_FIELDS and value is not None
        }
        ignored = sorted(set(fields) - set(MUTABLE_PROFILE_FIELDS))
        if ignored:
            logger.warning(
                "Ignoring non-editable profile fields",
                extra={"account_id": account_id, "ignored_fields": ignored}
            )

        if not allowed:
            return await self.get(account_id)

        account = await self.store.update_fields(account_id, allowed)
        if account is None:
            raise NotFoundError(context={"account_id": account_id})

        logger.info(
            "Profile updated",
            extra={"account_id": account_id, "updated_fields": sorted(allowed)}
        )
        return account

    async def record_login(self, account_id: str) -> Account:
        account = await self.store.update_fields(account_id, {"last_login_at": utcnow()})
        if account is None:
            raise NotFoundError(context={"account_id": account_id})
        return account

    async def leaderboard(self, limit: int = 10) -> List[LeaderboardEntry]:
        return await self.store.top_accounts(limit)

    async def guilds(self) -> List[GuildSummary]:
        return await self.store.guild_summaries()
