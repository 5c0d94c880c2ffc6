"""
GET /api/v1/leaderboard: creators ranked by Creator Score with their share
of the sponsor pool.

Route order matters: /leaderboard/stats must be declared before
/leaderboard/{talent_uuid}.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from creator_score.auth import require_admin_key
from creator_score.constants import ACTIVE_SPONSORS, TOTAL_SPONSORS_POOL
from creator_score.dependencies import get_leaderboard_service
from creator_score.exceptions import ProfileParseError, StorageError, TalentAPIError
from creator_score.leaderboard_service import LeaderboardService
from creator_score.rewards import format_reward
from creator_score.schemas import (
    Leaderboard,
    LeaderboardEntryOut,
    LeaderboardPage,
    LeaderboardStats,
    RankedEntry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["leaderboard"])


UPSTREAM_ERRORS = (TalentAPIError, ProfileParseError, StorageError)


def _bad_gateway(e: Exception) -> HTTPException:
    logger.error("Leaderboard build failed: %s", e)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="Failed to fetch leaderboard data",
    )


async def build_leaderboard_or_502(service: LeaderboardService) -> Leaderboard:
    try:
        return await service.build_leaderboard()
    except UPSTREAM_ERRORS as e:
        raise _bad_gateway(e) from e


def to_entry_out(entry: RankedEntry) -> LeaderboardEntryOut:
    # Opted-out creators show the amount they paid forward
    return LeaderboardEntryOut(**dict(entry), reward_display=format_reward(entry.final_reward))


@router.get("/leaderboard", response_model=LeaderboardPage)
async def get_leaderboard(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=200, ge=1, le=500),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    leaderboard = await build_leaderboard_or_502(service)
    start = (page - 1) * per_page
    window = leaderboard.entries[start : start + per_page]
    return LeaderboardPage(
        entries=[to_entry_out(e) for e in window],
        page=page,
        per_page=per_page,
        total=len(leaderboard.entries),
        summary=leaderboard.summary,
        complete=leaderboard.complete,
        fetched_at=leaderboard.fetched_at,
    )


@router.get("/leaderboard/stats", response_model=LeaderboardStats)
async def get_leaderboard_stats(service: LeaderboardService = Depends(get_leaderboard_service)):
    leaderboard = await build_leaderboard_or_502(service)
    return service.stats(leaderboard)


@router.get("/leaderboard/{talent_uuid}", response_model=LeaderboardEntryOut)
async def get_creator_rewards(
    talent_uuid: UUID,
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Return one creator's rank and reward ("my rewards")."""
    try:
        entry = await service.get_creator_rewards(str(talent_uuid))
    except UPSTREAM_ERRORS as e:
        raise _bad_gateway(e) from e
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Creator not on leaderboard")
    return to_entry_out(entry)


@router.get("/boosted-profiles")
async def get_boosted_profiles(service: LeaderboardService = Depends(get_leaderboard_service)):
    boosted = await service.get_boosted_ids()
    return {"profiles": sorted(boosted)}


@router.get("/sponsors")
def get_sponsors():
    return {"sponsors": ACTIVE_SPONSORS, "total_pool": TOTAL_SPONSORS_POOL}


@router.post("/admin/invalidate-leaderboard-cache", dependencies=[Depends(require_admin_key)])
def invalidate_leaderboard_cache(service: LeaderboardService = Depends(get_leaderboard_service)):
    invalidated = service.invalidate()
    logger.info("Leaderboard cache invalidated by admin (%s entries)", invalidated)
    return {"ok": True, "invalidated": invalidated}
