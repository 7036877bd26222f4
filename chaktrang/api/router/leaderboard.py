from fastapi import APIRouter, Depends, Query

from chaktrang.api.controller.user.dto.output_dto import (
    GuildDto, GuildListResponseDto, LeaderboardEntryDto, LeaderboardResponseDto
)
from chaktrang.core.dependencies import get_account_directory
from chaktrang.core.service.account.directory import AccountDirectory

router = APIRouter(tags=["Leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardResponseDto)
async def leaderboard(
    limit: int = Query(10, ge=1, le=100),
    directory: AccountDirectory = Depends(get_account_directory)
):
    """Top players by highest level, then wins, then experience."""
    entries = await directory.leaderboard(limit)
    return LeaderboardResponseDto(entries=[LeaderboardEntryDto.from_entry(e) for e in entries])


@router.get("/guilds", response_model=GuildListResponseDto)
async def guilds(directory: AccountDirectory = Depends(get_account_directory)):
    """Guilds with at least one member, largest first."""
    summaries = await directory.guilds()
    return GuildListResponseDto(guilds=[GuildDto.from_summary(s) for s in summaries])
