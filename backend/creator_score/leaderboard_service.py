"""
Leaderboard orchestration: fetch scores, boosts and decisions, then run the
rewards engine over them.

Score snapshots are cached for ``leaderboard_ttl`` seconds. A short count
(fewer creators than the eligible window) is returned flagged incomplete and
never cached, so the next request refetches. When a refetch fails the last
complete snapshot is served instead.
"""
import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from creator_score.cache import TTLCache
from creator_score.constants import (
    CACHE_KEY_BOOSTED,
    CACHE_KEY_DECISIONS,
    CACHE_KEY_TOP_ENTRIES,
    CACHE_TAG_LEADERBOARD,
)
from creator_score.decisions import DecisionStore
from creator_score.exceptions import ProfileParseError, StorageError, TalentAPIError
from creator_score.rewards import compute_leaderboard, rewards_summary
from creator_score.schemas import (
    Leaderboard,
    LeaderboardStats,
    OptOutDecision,
    RankedEntry,
    RewardPool,
    ScoreSnapshot,
)
from creator_score.talent_client import TalentClient

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaderboardService:
    def __init__(
        self,
        talent: TalentClient,
        decisions: DecisionStore,
        pool: RewardPool,
        cache: TTLCache,
        leaderboard_ttl: float = 600,
        boosted_ttl: float = 3600,
        decisions_ttl: float = 60,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.talent = talent
        self.decisions = decisions
        self.pool = pool
        self.cache = cache
        self.leaderboard_ttl = leaderboard_ttl
        self.boosted_ttl = boosted_ttl
        self.decisions_ttl = decisions_ttl
        self._now = now
        self._last_good: ScoreSnapshot | None = None

    async def get_score_snapshot(self) -> ScoreSnapshot:
        cached = self.cache.get(CACHE_KEY_TOP_ENTRIES)
        if cached is not None:
            return cached

        try:
            entries = await self.talent.fetch_top_scored_entries(limit=self.pool.eligible_rank_cutoff)
        except (TalentAPIError, ProfileParseError):
            if self._last_good is None:
                raise
            logger.warning(
                "Score fetch failed, serving snapshot from %s",
                self._last_good.fetched_at.isoformat(),
                exc_info=True,
            )
            return self._last_good

        snapshot = ScoreSnapshot(
            entries=entries,
            fetched_at=self._now(),
            complete=len(entries) >= self.pool.eligible_rank_cutoff,
        )
        if snapshot.complete:
            self.cache.set(
                CACHE_KEY_TOP_ENTRIES, snapshot, self.leaderboard_ttl, tags=[CACHE_TAG_LEADERBOARD]
            )
            self._last_good = snapshot
        else:
            logger.warning(
                "Talent API returned %s creators, expected %s; result not cached",
                len(entries),
                self.pool.eligible_rank_cutoff,
            )
        return snapshot

    async def get_boosted_ids(self) -> frozenset[str]:
        cached = self.cache.get(CACHE_KEY_BOOSTED)
        if cached is not None:
            return cached

        try:
            boosted = await self.talent.fetch_boosted_ids(self.pool.token_holder_threshold)
        except TalentAPIError as e:
            logger.warning("Failed to fetch boosted profiles: %s", e)
            return frozenset()

        if boosted.complete:
            self.cache.set(CACHE_KEY_BOOSTED, boosted.ids, self.boosted_ttl, tags=[CACHE_TAG_LEADERBOARD])
        logger.info("Retrieved %s boosted profiles", len(boosted.ids))
        return boosted.ids

    async def get_decisions(self) -> dict[str, OptOutDecision]:
        cached = self.cache.get(CACHE_KEY_DECISIONS)
        if cached is not None:
            return cached

        try:
            decisions = await asyncio.to_thread(self.decisions.get_all)
        except StorageError:
            raise
        except Exception as e:
            logger.error("Failed to load rewards decisions: %s", e, exc_info=True)
            raise StorageError("Failed to load rewards decisions") from e

        self.cache.set(CACHE_KEY_DECISIONS, decisions, self.decisions_ttl, tags=[CACHE_TAG_LEADERBOARD])
        return decisions

    async def build_leaderboard(self) -> Leaderboard:
        snapshot, boosted, decisions = await asyncio.gather(
            self.get_score_snapshot(),
            self.get_boosted_ids(),
            self.get_decisions(),
        )
        entries = compute_leaderboard(snapshot.entries, self.pool, boosted, decisions)
        summary = rewards_summary(entries, self.pool)
        logger.info(
            "Built leaderboard: %s entries, %s boosted, %s opted out",
            len(entries),
            summary.boosted_creators,
            summary.opted_out_creators,
        )
        return Leaderboard(
            entries=entries,
            summary=summary,
            complete=snapshot.complete,
            fetched_at=snapshot.fetched_at,
        )

    async def get_creator_rewards(self, talent_uuid: str) -> RankedEntry | None:
        leaderboard = await self.build_leaderboard()
        return next((e for e in leaderboard.entries if e.id == talent_uuid), None)

    def stats(self, leaderboard: Leaderboard) -> LeaderboardStats:
        eligible = [e for e in leaderboard.entries if e.rank <= self.pool.eligible_rank_cutoff]
        return LeaderboardStats(
            min_score=min((e.score for e in eligible), default=None),
            total_creators=len(leaderboard.entries),
            eligible_creators=len(eligible),
        )

    def invalidate_decisions(self) -> None:
        self.cache.invalidate(CACHE_KEY_DECISIONS)

    def invalidate(self) -> int:
        return self.cache.invalidate_tag(CACHE_TAG_LEADERBOARD)
