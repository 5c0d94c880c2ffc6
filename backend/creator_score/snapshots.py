"""
Frozen leaderboard snapshots.

A snapshot pins every creator's rank and payable reward at the end of a
round so reads no longer depend on live scores. Table:

    create table if not exists public.leaderboard_snapshots (
        talent_uuid     text primary key,
        rank            integer not null,
        rewards_amount  double precision not null,
        created_at      timestamptz not null default now()
    );
"""
import logging

from supabase import Client

from creator_score.exceptions import SnapshotExistsError, StorageError
from creator_score.schemas import RankedEntry, SnapshotRow

logger = logging.getLogger(__name__)

TABLE = "leaderboard_snapshots"


class SnapshotStore:
    def __init__(self, client: Client):
        self.client = client

    def exists(self) -> bool:
        result = (
            self.client.table(TABLE)
            .select("talent_uuid", count="exact")
            .limit(1)
            .execute()
        )
        count = result.count or 0
        logger.debug("Snapshot exists: %s (count: %s)", count > 0, count)
        return count > 0

    def create(self, entries: list[RankedEntry]) -> int:
        """Freeze ``entries``. Stores the unrounded payable amount per creator."""
        if self.exists():
            raise SnapshotExistsError("Snapshot already exists")
        rows = [
            {
                "talent_uuid": entry.id,
                "rank": entry.rank,
                "rewards_amount": entry.payable_reward,
            }
            for entry in entries
        ]
        if not rows:
            raise StorageError("Cannot create an empty snapshot")
        result = self.client.table(TABLE).insert(rows).execute()
        if not result.data:
            raise StorageError("Failed to create snapshot")
        logger.info("Created leaderboard snapshot with %s entries", len(rows))
        return len(rows)

    def get_all(self) -> list[SnapshotRow]:
        result = self.client.table(TABLE).select("*").order("rank").execute()
        return [SnapshotRow(**r) for r in (result.data or [])]

    def get_for_user(self, talent_uuid: str) -> SnapshotRow | None:
        result = (
            self.client.table(TABLE)
            .select("*")
            .eq("talent_uuid", talent_uuid)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return SnapshotRow(**result.data[0])

    def metadata(self) -> tuple[int, str | None]:
        """Return (row count, newest created_at)."""
        result = (
            self.client.table(TABLE)
            .select("created_at", count="exact")
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        created_at = result.data[0].get("created_at") if result.data else None
        return result.count or 0, created_at
