from typing import List
from pydantic_settings import BaseSettings
from functools import lru_cache

DEFAULT_JWT_SECRET_KEY = "ouk-chaktrang-insecure-default-signing-key"


class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "OukChaktrang"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Security Settings
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    TOKEN_EXPIRE_DAYS: int = 7
    REQUIRE_SECURE_SECRET: bool = False  # refuse to start with the default key
    BCRYPT_ROUNDS: int = 10

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Storage Settings
    STORAGE_BACKEND: str = "sql"  # memory, sql or redis
    DATABASE_URL: str = "sqlite+aiosqlite:///./oukchaktrang.db"
    DB_LOGGING_ENABLED: bool = False
    DB_POOL_SIZE: int = 5

    # Redis Settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10
    REDIS_KEY_PREFIX: str = "oukchaktrang"

    # Progression Settings
    STARTING_COINS: int = 1000
    STARTING_DIAMONDS: int = 10
    MAX_LEVEL: int = 50
    MAX_REWARD_PER_GAME: int = 1_000_000  # coins or diamonds a single result may award
    LEDGER_MAX_RETRIES: int = 5  # compare-and-swap attempts per game result

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
