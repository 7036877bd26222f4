"""
Builds the configured AccountStore at process startup.
"""

from typing import Optional

from chaktrang.core.logger.logger import get_logger
from chaktrang.core.service.account.store import AccountStore
from chaktrang.infra.config.settings import Settings, get_settings

logger = get_logger(__name__)


def create_account_store(settings: Optional[Settings] = None) -> AccountStore:
    settings = settings or get_settings()
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "memory":
        from chaktrang.infra.repository.memory_account_store import InMemoryAccountStore
        store = InMemoryAccountStore()
    elif backend == "sql":
        from chaktrang.infra.database import DatabaseManager
        from chaktrang.infra.repository.sql_account_store import SQLAccountStore
        store = SQLAccountStore(DatabaseManager(settings.DATABASE_URL))
    elif backend == "redis":
        from chaktrang.infra.config.redis import get_redis
        from chaktrang.infra.repository.redis_account_store import RedisAccountStore
        store = RedisAccountStore(get_redis(), settings.REDIS_KEY_PREFIX)
    else:
        raise ValueError(f"Unsupported STORAGE_BACKEND: {settings.STORAGE_BACKEND}")

    logger.info("Account store configured", extra={"backend": store.backend_name})
    return store
