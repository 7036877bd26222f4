import asyncio
import pytest
from unittest.mock import AsyncMock

from chaktrang.core.exceptions.base import (
    ConcurrentUpdateError, InvalidOutcomeError, NotFoundError, StorageUnavailableError
)
from chaktrang.core.service.account.directory import AccountDirectory
from chaktrang.core.service.account.models.account import ProgressionState
from chaktrang.core.service.progression.ledger import ProgressionLedger


async def _account_at(directory, current_level=1, highest_level=1):
    account = await directory.create("sokha", "sokha@example.com", "hash")
    state = ProgressionState(
        coins=account.coins,
        diamonds=account.diamonds,
        current_level=current_level,
        highest_level=highest_level
    )
    assert await directory.store.compare_and_swap_progression(account.id, account.progression(), state)
    return await directory.get(account.id)


@pytest.mark.asyncio
class TestProgressionLedger:

    async def test_win_at_current_level(self, directory, ledger):
        account = await _account_at(directory, current_level=3, highest_level=5)

        updated = await ledger.apply_result(account.id, "win", level_played=3, coins_earned=50, diamonds_earned=1)

        assert updated.current_level == 4
        assert updated.highest_level == 5
        assert updated.total_wins == 1
        assert updated.coins == account.coins + 50
        assert updated.diamonds == account.diamonds + 1
        assert updated.experience_points == 100

        stored = await directory.get(account.id)
        assert stored.progression() == updated.progression()

    async def test_replaying_level_then_keeps_progress(self, directory, ledger):
        account = await _account_at(directory, current_level=3, highest_level=5)
        await ledger.apply_result(account.id, "win", level_played=3)

        updated = await ledger.apply_result(account.id, "win", level_played=5)

        assert updated.current_level == 4
        assert updated.highest_level == 5
        assert updated.total_wins == 2

    async def test_negative_coins_rejected_and_state_unchanged(self, directory, ledger):
        account = await _account_at(directory)

        with pytest.raises(InvalidOutcomeError):
            await ledger.apply_result(account.id, "win", level_played=1, coins_earned=-10)

        assert (await directory.get(account.id)).progression() == account.progression()

    @pytest.mark.parametrize("outcome", ["victory", "", "WIN!"])
    async def test_unknown_outcome_rejected(self, directory, ledger, outcome):
        account = await _account_at(directory)

        with pytest.raises(InvalidOutcomeError):
            await ledger.apply_result(account.id, outcome, level_played=1)

    async def test_missing_account(self, ledger):
        with pytest.raises(NotFoundError):
            await ledger.apply_result("missing-id", "win", level_played=1)

    async def test_duplicate_submissions_count_twice(self, directory, ledger):
        account = await _account_at(directory)

        await ledger.apply_result(account.id, "loss", level_played=1)
        updated = await ledger.apply_result(account.id, "loss", level_played=1)

        assert updated.total_losses == 2
        assert updated.experience_points == 50

    async def test_concurrent_results_are_not_lost(self, directory, ledger):
        account = await _account_at(directory)

        await asyncio.gather(*[
            ledger.apply_result(account.id, "draw", level_played=1, coins_earned=10)
            for _ in range(20)
        ])

        stored = await directory.get(account.id)
        assert stored.total_draws == 20
        assert stored.coins == account.coins + 200
        assert stored.experience_points == 1000

    async def test_gives_up_after_repeated_conflicts(self, directory):
        account = await _account_at(directory)
        directory.store.compare_and_swap_progression = AsyncMock(return_value=False)
        ledger = ProgressionLedger(directory, max_retries=3)

        with pytest.raises(ConcurrentUpdateError):
            await ledger.apply_result(account.id, "win", level_played=1)

        assert directory.store.compare_and_swap_progression.await_count == 3

    async def test_storage_failure_is_not_not_found(self):
        store = AsyncMock()
        store.find_one.side_effect = StorageUnavailableError("sql", "connection refused")
        ledger = ProgressionLedger(AccountDirectory(store))

        with pytest.raises(StorageUnavailableError):
            await ledger.apply_result("some-id", "win", level_played=1)


@pytest.mark.asyncio
async def test_concurrent_results_on_sql_store(sql_store):
    directory = AccountDirectory(sql_store)
    ledger = ProgressionLedger(directory, max_retries=50)
    account = await directory.create("sokha", "sokha@example.com", "hash")

    await asyncio.gather(*[
        ledger.apply_result(account.id, "win", level_played=10, coins_earned=1)
        for _ in range(5)
    ])

    stored = await directory.get(account.id)
    assert stored.total_wins == 5
    assert stored.coins == account.coins + 5
    assert stored.highest_level == 10


@pytest.mark.asyncio
async def test_oversized_reward_rejected_on_sql_store(sql_store):
    directory = AccountDirectory(sql_store)
    ledger = ProgressionLedger(directory)
    account = await directory.create("sokha", "sokha@example.com", "hash")

    with pytest.raises(InvalidOutcomeError):
        await ledger.apply_result(account.id, "win", level_played=1, coins_earned=10**19)

    assert (await directory.get(account.id)).progression() == account.progression()


@pytest.mark.asyncio
@pytest.mark.parametrize("outcome,level_played", [(5, 1), ("win", "abc"), ("win", None), (None, 1)])
async def test_malformed_result_is_invalid_outcome(ledger, directory, outcome, level_played):
    account = await directory.create("sokha", "sokha@example.com", "hash")

    with pytest.raises(InvalidOutcomeError):
        await ledger.apply_result(account.id, outcome, level_played=level_played)


@pytest.mark.asyncio
async def test_streak_and_games_played_persist_on_sql_store(sql_store):
    directory = AccountDirectory(sql_store)
    ledger = ProgressionLedger(directory)
    account = await directory.create("sokha", "sokha@example.com", "hash")

    await ledger.apply_result(account.id, "win", level_played=1)
    await ledger.apply_result(account.id, "win", level_played=2)
    await ledger.apply_result(account.id, "loss", level_played=3)
    await ledger.apply_result(account.id, "win", level_played=3)

    stored = await directory.get(account.id)
    assert stored.games_played == 4
    assert stored.win_streak == 1
    assert stored.win_rate == 75.0
    assert stored.rating == 1200
    assert stored.achievements == []
