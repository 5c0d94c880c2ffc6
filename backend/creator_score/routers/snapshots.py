"""
Leaderboard snapshot routes. POST freezes the current leaderboard at the end
of a round; reads then come from the snapshot table.
"""
import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from creator_score.auth import require_admin_key
from creator_score.dependencies import get_leaderboard_service, get_snapshot_store
from creator_score.exceptions import SnapshotExistsError, StorageError
from creator_score.leaderboard_service import LeaderboardService
from creator_score.routers.leaderboard import build_leaderboard_or_502
from creator_score.schemas import SnapshotResponse, SnapshotRow
from creator_score.snapshots import SnapshotStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/leaderboard-snapshot", tags=["snapshots"])


@router.get("", response_model=SnapshotResponse)
def get_snapshot(store: SnapshotStore = Depends(get_snapshot_store)):
    if not store.exists():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No snapshot found")
    rows = store.get_all()
    total_count, created_at = store.metadata()
    return SnapshotResponse(snapshots=rows, total_count=total_count, created_at=created_at)


@router.get("/{talent_uuid}", response_model=SnapshotRow)
def get_snapshot_for_user(
    talent_uuid: UUID,
    store: SnapshotStore = Depends(get_snapshot_store),
):
    row = store.get_for_user(str(talent_uuid))
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Creator not in snapshot")
    return row


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin_key)])
async def create_snapshot(
    store: SnapshotStore = Depends(get_snapshot_store),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    if await asyncio.to_thread(store.exists):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Snapshot already exists")

    leaderboard = await build_leaderboard_or_502(service)
    if not leaderboard.complete:
        logger.warning("Refusing to snapshot an incomplete leaderboard (%s entries)", len(leaderboard.entries))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Leaderboard data is incomplete, try again later",
        )

    try:
        count = await asyncio.to_thread(store.create, leaderboard.entries)
    except SnapshotExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Snapshot already exists") from e
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e
    return {
        "success": True,
        "entries_count": count,
        "message": f"Successfully created snapshot with {count} entries",
    }
