"""
Account store using SQLAlchemy ORM
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional
from sqlalchemy import select, update, func, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError

from chaktrang.core.exceptions.base import (
    DuplicateEmailError, DuplicateUsernameError, StorageUnavailableError
)
from chaktrang.core.logger.logger import get_logger
from chaktrang.core.service.account.models.account import (
    Account, GuildSummary, LeaderboardEntry, ProgressionState, PROGRESSION_FIELDS, rank_accounts
)
from chaktrang.core.service.account.store import (
    AccountStore, check_lookup_field, check_updatable_fields
)
from chaktrang.infra.database import DatabaseManager
from chaktrang.infra.models import AccountModel

logger = get_logger(__name__)

_CONNECTIVITY_ERRORS = (OperationalError, InterfaceError, OSError)


class SQLAccountStore(AccountStore):
    """Account store backed by a relational database"""

    backend_name = "sql"

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def connect(self) -> None:
        await self.db_manager.connect()

    async def close(self) -> None:
        await self.db_manager.close()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, translating connectivity failures into StorageUnavailableError"""
        try:
            if self.db_manager.get_session_factory() is None:
                await self.db_manager.connect()
            session_factory = self.db_manager.get_session_factory()
            async with session_factory() as session:
                try:
                    yield session
                except BaseException:
                    await session.rollback()
                    raise
        except IntegrityError:
            raise
        except _CONNECTIVITY_ERRORS as e:
            raise StorageUnavailableError(self.backend_name, str(e)) from e
        except DBAPIError as e:
            if e.connection_invalidated:
                raise StorageUnavailableError(self.backend_name, str(e)) from e
            raise

    def _model_to_entity(self, model: AccountModel) -> Account:
        """Convert SQLAlchemy model to Pydantic entity"""
        return Account(
            id=model.id,
            username=model.username,
            email=model.email,
            password_hash=model.password_hash,
            display_name=model.display_name,
            avatar_url=model.avatar_url,
            country=model.country,
            guild_name=model.guild_name,
            coins=model.coins,
            diamonds=model.diamonds,
            current_level=model.current_level,
            highest_level=model.highest_level,
            total_wins=model.total_wins,
            total_losses=model.total_losses,
            total_draws=model.total_draws,
            experience_points=model.experience_points,
            games_played=model.games_played,
            win_streak=model.win_streak,
            rating=model.rating,
            is_developer=model.is_developer,
            is_premium=model.is_premium,
            achievements=list(model.achievements or []),
            created_at=model.created_at,
            last_login_at=model.last_login_at
        )

    async def ping(self) -> bool:
        async with self._session() as session:
            await session.execute(select(1))
        return True

    async def _raise_duplicate(self, session: AsyncSession, account: Account) -> None:
        taken = await session.execute(
            select(AccountModel.id).where(AccountModel.username == account.username)
        )
        if taken.scalar_one_or_none() is not None:
            raise DuplicateUsernameError(account.username)
        raise DuplicateEmailError(account.email)

    async def insert_unique(self, account: Account) -> Account:
        async with self._session() as session:
            existing = await session.execute(
                select(AccountModel.username, AccountModel.email).where(
                    (AccountModel.username == account.username) | (AccountModel.email == account.email)
                )
            )
            for username, _ in existing.all():
                if username == account.username:
                    raise DuplicateUsernameError(account.username)
                raise DuplicateEmailError(account.email)

            session.add(AccountModel(**account.model_dump()))
            try:
                await session.commit()
            except IntegrityError as e:
                # Lost a registration race; the unique index decided the winner
                await session.rollback()
                logger.warning(
                    "Account insert rejected by unique constraint",
                    extra={"username": account.username, "error": str(e.orig)}
                )
                await self._raise_duplicate(session, account)

            logger.info(
                "New account created in database",
                extra={"account_id": account.id, "username": account.username}
            )
            return account

    async def find_one(self, field: str, value: str) -> Optional[Account]:
        check_lookup_field(field)
        async with self._session() as session:
            stmt = select(AccountModel).where(getattr(AccountModel, field) == value)
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            return self._model_to_entity(model) if model else None

    async def update_fields(self, account_id: str, fields: Dict[str, Any]) -> Optional[Account]:
        check_updatable_fields(fields)
        async with self._session() as session:
            if fields:
                result = await session.execute(
                    update(AccountModel).where(AccountModel.id == account_id).values(**fields)
                )
                await session.commit()
                if result.rowcount == 0:
                    return None
            model = await session.get(AccountModel, account_id, populate_existing=True)
            return self._model_to_entity(model) if model else None

    async def compare_and_swap_progression(
        self,
        account_id: str,
        expected: ProgressionState,
        new: ProgressionState
    ) -> bool:
        expected_values = expected.model_dump()
        conditions = [AccountModel.id == account_id] + [
            getattr(AccountModel, name) == expected_values[name] for name in PROGRESSION_FIELDS
        ]
        async with self._session() as session:
            result = await session.execute(
                update(AccountModel).where(and_(*conditions)).values(**new.model_dump())
            )
            await session.commit()
            return result.rowcount == 1

    async def top_accounts(self, limit: int) -> List[LeaderboardEntry]:
        async with self._session() as session:
            stmt = (
                select(AccountModel)
                .order_by(
                    AccountModel.highest_level.desc(),
                    AccountModel.total_wins.desc(),
                    AccountModel.experience_points.desc(),
                    AccountModel.username
                )
                .limit(limit)
            )
            result = await session.execute(stmt)
            return rank_accounts([self._model_to_entity(m) for m in result.scalars().all()], limit)

    async def guild_summaries(self) -> List[GuildSummary]:
        async with self._session() as session:
            member_count = func.count(AccountModel.id)
            stmt = (
                select(AccountModel.guild_name, member_count)
                .where(AccountModel.guild_name != "")
                .group_by(AccountModel.guild_name)
                .order_by(member_count.desc(), AccountModel.guild_name)
            )
            result = await session.execute(stmt)
            return [GuildSummary(guild_name=name, member_count=count) for name, count in result.all()]
