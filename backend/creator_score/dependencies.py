"""
FastAPI dependency providers. Tests swap these out via ``app.dependency_overrides``.
"""
from functools import lru_cache

from creator_score.cache import TTLCache
from creator_score.config import settings
from creator_score.constants import TOTAL_SPONSORS_POOL
from creator_score.decisions import DecisionStore
from creator_score.leaderboard_service import LeaderboardService
from creator_score.schemas import RewardPool
from creator_score.snapshots import SnapshotStore
from creator_score.supabase_client import get_supabase
from creator_score.talent_client import TalentClient


def get_reward_pool() -> RewardPool:
    return RewardPool(
        total_pool_amount=TOTAL_SPONSORS_POOL,
        boost_multiplier=settings.boost_multiplier,
        token_holder_threshold=settings.token_holder_threshold,
        eligible_rank_cutoff=settings.eligible_rank_cutoff,
    )


def get_decision_store() -> DecisionStore:
    return DecisionStore(get_supabase())


def get_snapshot_store() -> SnapshotStore:
    return SnapshotStore(get_supabase())


@lru_cache
def get_leaderboard_service() -> LeaderboardService:
    talent = TalentClient(
        api_key=settings.talent_api_key,
        base_url=settings.talent_api_base_url,
        timeout=settings.talent_request_timeout,
        page_delay=settings.talent_page_delay,
    )
    return LeaderboardService(
        talent=talent,
        decisions=get_decision_store(),
        pool=get_reward_pool(),
        cache=TTLCache(),
        leaderboard_ttl=settings.leaderboard_cache_ttl,
        boosted_ttl=settings.boosted_cache_ttl,
        decisions_ttl=settings.decisions_cache_ttl,
    )
