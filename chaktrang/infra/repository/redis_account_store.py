"""
Redis-backed document store: one JSON document per account plus
SET NX index keys that make username and email unique.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.exceptions import WatchError

from chaktrang.core.exceptions.base import (
    ConcurrentUpdateError, DuplicateEmailError, DuplicateUsernameError, StorageUnavailableError
)
from chaktrang.core.logger.logger import get_logger
from chaktrang.core.service.account.models.account import (
    Account, GuildSummary, LeaderboardEntry, ProgressionState, rank_accounts, summarize_guilds
)
from chaktrang.core.service.account.store import (
    AccountStore, check_lookup_field, check_updatable_fields
)
from chaktrang.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()

MAX_WATCH_ATTEMPTS = 10

# Claims both index keys and writes the document in one server-side step, so a
# failed registration never leaves an index key without its document.
# KEYS: username index, email index, document, account set. ARGV: id, document.
_INSERT_SCRIPT = """
if not redis.call("SET", KEYS[1], ARGV[1], "NX") then
    return 1
end
if not redis.call("SET", KEYS[2], ARGV[1], "NX") then
    redis.call("DEL", KEYS[1])
    return 2
end
redis.call("SET", KEYS[3], ARGV[2])
redis.call("SADD", KEYS[4], ARGV[1])
return 0
"""
_USERNAME_TAKEN = 1
_EMAIL_TAKEN = 2


class RedisAccountStore(AccountStore):
    """Account documents in Redis; inserts run as one script, updates under WATCH/MULTI"""

    backend_name = "redis"

    def __init__(self, redis_client: Redis, key_prefix: Optional[str] = None):
        self.redis = redis_client
        self.key_prefix = key_prefix or settings.REDIS_KEY_PREFIX
        self._insert_script = self.redis.register_script(_INSERT_SCRIPT)

    def _account_key(self, account_id: str) -> str:
        return f"{self.key_prefix}:account:{account_id}"

    def _index_key(self, field: str, value: str) -> str:
        return f"{self.key_prefix}:{field}:{value}"

    @property
    def _all_accounts_key(self) -> str:
        return f"{self.key_prefix}:accounts"

    @asynccontextmanager
    async def _guard(self) -> AsyncIterator[None]:
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error("Redis unavailable", extra={"error": str(e), "error_type": type(e).__name__})
            raise StorageUnavailableError(self.backend_name, str(e)) from e

    async def close(self) -> None:
        await self.redis.aclose()

    async def ping(self) -> bool:
        async with self._guard():
            await self.redis.ping()
        return True

    async def insert_unique(self, account: Account) -> Account:
        keys = [
            self._index_key("username", account.username),
            self._index_key("email", account.email),
            self._account_key(account.id),
            self._all_accounts_key,
        ]
        async with self._guard():
            status = await self._insert_script(keys=keys, args=[account.id, account.model_dump_json()])

        if status == _USERNAME_TAKEN:
            raise DuplicateUsernameError(account.username)
        if status == _EMAIL_TAKEN:
            raise DuplicateEmailError(account.email)

        logger.info(
            "New account document stored",
            extra={"account_id": account.id, "username": account.username}
        )
        return account

    async def _load(self, account_id: str) -> Optional[Account]:
        raw = await self.redis.get(self._account_key(account_id))
        return Account.model_validate_json(raw) if raw else None

    async def find_one(self, field: str, value: str) -> Optional[Account]:
        check_lookup_field(field)
        async with self._guard():
            if field == "id":
                return await self._load(value)
            account_id = await self.redis.get(self._index_key(field, value))
            return await self._load(account_id) if account_id else None

    async def _rewrite(
        self,
        account_id: str,
        mutate: Callable[[Account], Optional[Account]]
    ) -> Optional[Account]:
        """
        Read-modify-write one document under WATCH.
        `mutate` returns the new document, or None to abort without writing.
        """
        key = self._account_key(account_id)
        for _ in range(MAX_WATCH_ATTEMPTS):
            async with self.redis.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    raw = await pipe.get(key)
                    if raw is None:
                        return None
                    updated = mutate(Account.model_validate_json(raw))
                    if updated is None:
                        return None
                    pipe.multi()
                    pipe.set(key, updated.model_dump_json())
                    await pipe.execute()
                    return updated
                except WatchError:
                    logger.debug("Account document changed during update, retrying", extra={"account_id": account_id})
        raise ConcurrentUpdateError(account_id, MAX_WATCH_ATTEMPTS)

    async def update_fields(self, account_id: str, fields: Dict[str, Any]) -> Optional[Account]:
        check_updatable_fields(fields)
        async with self._guard():
            return await self._rewrite(account_id, lambda account: account.model_copy(update=fields))

    async def compare_and_swap_progression(
        self,
        account_id: str,
        expected: ProgressionState,
        new: ProgressionState
    ) -> bool:
        key = self._account_key(account_id)
        async with self._guard():
            async with self.redis.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    raw = await pipe.get(key)
                    if raw is None:
                        return False
                    account = Account.model_validate_json(raw)
                    if account.progression() != expected:
                        return False
                    pipe.multi()
                    pipe.set(key, account.with_progression(new).model_dump_json())
                    await pipe.execute()
                    return True
                except WatchError:
                    return False

    async def _all_accounts(self) -> List[Account]:
        account_ids = await self.redis.smembers(self._all_accounts_key)
        if not account_ids:
            return []
        documents = await self.redis.mget([self._account_key(account_id) for account_id in account_ids])
        return [Account.model_validate_json(raw) for raw in documents if raw]

    async def top_accounts(self, limit: int) -> List[LeaderboardEntry]:
        async with self._guard():
            return rank_accounts(await self._all_accounts(), limit)

    async def guild_summaries(self) -> List[GuildSummary]:
        async with self._guard():
            return summarize_guilds(await self._all_accounts())
