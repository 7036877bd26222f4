import asyncio
import pytest

from chaktrang.core.exceptions.base import (
    DuplicateEmailError, DuplicateUsernameError, NotFoundError
)
from chaktrang.core.service.account.directory import AccountDirectory


@pytest.mark.asyncio
class TestAccountDirectory:

    async def test_create_and_find(self, directory):
        account = await directory.create("sokha", "sokha@example.com", "hash", "Sokha")

        assert (await directory.find_by_id(account.id)).username == "sokha"
        assert (await directory.find_by_username("sokha")).id == account.id
        assert (await directory.find_by_email("sokha@example.com")).id == account.id
        assert await directory.find_by_username("nobody") is None

    async def test_email_stored_and_found_lower_cased(self, directory):
        account = await directory.create("sokha", "  Sokha@Example.COM ", "hash")

        assert account.email == "sokha@example.com"
        assert (await directory.find_by_email("SOKHA@example.com")).id == account.id

    async def test_new_account_snapshot_fields(self, directory):
        account = await directory.create("sokha", "sokha@example.com", "hash")

        assert account.rating == 1200
        assert account.is_developer is False
        assert account.is_premium is False
        assert account.achievements == []
        assert (account.games_played, account.win_streak, account.win_rate) == (0, 0, 0.0)

    async def test_get_missing_raises_not_found(self, directory):
        with pytest.raises(NotFoundError):
            await directory.get("missing-id")

    async def test_update_profile_only_touches_allowed_fields(self, directory):
        account = await directory.create("sokha", "sokha@example.com", "hash")

        updated = await directory.update_profile(account.id, {
            "display_name": "Master Sokha",
            "guild_name": "Angkor Knights",
            "coins": 999999,
            "password_hash": "attacker",
            "id": "new-id",
            "email": "attacker@example.com",
            "current_level": 50,
        })

        assert updated.display_name == "Master Sokha"
        assert updated.guild_name == "Angkor Knights"
        assert updated.id == account.id
        assert updated.coins == account.coins
        assert updated.password_hash == "hash"
        assert updated.email == "sokha@example.com"
        assert updated.current_level == 1

    async def test_update_profile_none_values_leave_fields(self, directory):
        account = await directory.create("sokha", "sokha@example.com", "hash")

        updated = await directory.update_profile(account.id, {"display_name": None, "country": "Thailand"})

        assert updated.display_name == "sokha"
        assert updated.country == "Thailand"

    async def test_update_profile_missing_account(self, directory):
        with pytest.raises(NotFoundError):
            await directory.update_profile("missing-id", {"display_name": "x"})

    async def test_update_profile_with_no_allowed_fields_still_checks_existence(self, directory):
        with pytest.raises(NotFoundError):
            await directory.update_profile("missing-id", {"coins": 5})


@pytest.mark.asyncio
async def test_concurrent_registrations_only_one_wins(any_store):
    """Racing registrations of one username never both succeed"""
    directory = AccountDirectory(any_store)

    results = await asyncio.gather(
        *[directory.create("sokha", f"sokha{i}@example.com", "hash") for i in range(5)],
        return_exceptions=True
    )

    created = [r for r in results if not isinstance(r, Exception)]
    duplicates = [r for r in results if isinstance(r, DuplicateUsernameError)]
    assert len(created) == 1
    assert len(duplicates) == 4


@pytest.mark.asyncio
async def test_duplicate_email_reported_as_email(any_store):
    directory = AccountDirectory(any_store)
    await directory.create("sokha", "sokha@example.com", "hash")

    with pytest.raises(DuplicateEmailError):
        await directory.create("vanna", "sokha@example.com", "hash")
