"""
Reward allocation over a ranked leaderboard.

Only entries ranked within ``pool.eligible_rank_cutoff`` share the sponsor
pool, proportionally to score. ``allocate_rewards`` produces the display view
where every eligible creator, opted out or not, consumes pool proportion.
``redistribute_for_opt_outs`` produces the payout view where opted-out
creators leave the denominator and their share flows to everyone else.
"""
import logging
import math
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from creator_score.ranking import assign_ranks
from creator_score.schemas import (
    OptOutDecision,
    RankedEntry,
    RewardPool,
    RewardsSummary,
    ScoredEntry,
)

logger = logging.getLogger(__name__)


def _is_eligible(entry: RankedEntry, pool: RewardPool) -> bool:
    return entry.rank <= pool.eligible_rank_cutoff


def _proportional_share(score: int, total_score: int, pool: RewardPool) -> float:
    if total_score <= 0:
        return 0.0
    return pool.total_pool_amount * score / total_score


def apply_boost(base_reward: float, is_boosted: bool, pool: RewardPool) -> float:
    if not is_boosted:
        return base_reward
    return base_reward * (1 + pool.boost_multiplier)


def allocate_rewards(
    ranked: Iterable[RankedEntry],
    pool: RewardPool,
    boosted_ids: Iterable[str] = (),
    decisions: Mapping[str, OptOutDecision] | None = None,
) -> list[RankedEntry]:
    """Attach boost, decision and proportional rewards to ranked entries.

    Opted-out entries stay in the denominator here; the value computed for
    them is what they donate, not what they are paid.
    """
    ranked = list(ranked)
    boosted = frozenset(boosted_ids)
    decisions = decisions or {}

    eligible_total = sum(e.score for e in ranked if _is_eligible(e, pool))

    allocated = []
    for entry in ranked:
        record = decisions.get(entry.id)
        is_boosted = entry.id in boosted
        base_reward = 0.0
        final_reward = 0.0
        if _is_eligible(entry, pool):
            base_reward = _proportional_share(entry.score, eligible_total, pool)
            final_reward = apply_boost(base_reward, is_boosted, pool)
        allocated.append(
            entry.model_copy(
                update={
                    "is_boosted": is_boosted,
                    "decision": record.decision if record else None,
                    "base_reward": base_reward,
                    "final_reward": final_reward,
                }
            )
        )
    return allocated


def redistribute_for_opt_outs(
    ranked: Iterable[RankedEntry],
    pool: RewardPool,
) -> list[RankedEntry]:
    """Recompute rewards for non-opted-out entries over the shrunken pool.

    Opted-out entries keep the amounts they already carry, for display as
    paid forward. Entries outside the eligible window are zeroed.
    """
    ranked = list(ranked)
    remaining_total = sum(
        e.score for e in ranked if _is_eligible(e, pool) and not e.is_opted_out
    )

    redistributed = []
    for entry in ranked:
        if not _is_eligible(entry, pool):
            update = {"base_reward": 0.0, "final_reward": 0.0}
        elif entry.is_opted_out:
            update = {}
        else:
            base_reward = _proportional_share(entry.score, remaining_total, pool)
            update = {
                "base_reward": base_reward,
                "final_reward": apply_boost(base_reward, entry.is_boosted, pool),
            }
        redistributed.append(entry.model_copy(update=update))
    return redistributed


def compute_leaderboard(
    entries: Iterable[ScoredEntry],
    pool: RewardPool,
    boosted_ids: Iterable[str] = (),
    decisions: Mapping[str, OptOutDecision] | None = None,
) -> list[RankedEntry]:
    """Rank, allocate and redistribute in one pass."""
    ranked = assign_ranks(entries)
    allocated = allocate_rewards(ranked, pool, boosted_ids, decisions)
    result = redistribute_for_opt_outs(allocated, pool)
    logger.debug(
        "Computed leaderboard: %s entries, pool %s", len(result), pool.total_pool_amount
    )
    return result


def donated_amount(ranked: Iterable[RankedEntry], pool: RewardPool) -> float:
    return math.fsum(
        e.base_reward for e in ranked if _is_eligible(e, pool) and e.is_opted_out
    )


def rewards_summary(ranked: Iterable[RankedEntry], pool: RewardPool) -> RewardsSummary:
    eligible = [e for e in ranked if _is_eligible(e, pool)]
    return RewardsSummary(
        total_pool=pool.total_pool_amount,
        eligible_creators=len(eligible),
        opted_out_creators=sum(1 for e in eligible if e.is_opted_out),
        boosted_creators=sum(1 for e in eligible if e.is_boosted),
        donated_amount=donated_amount(eligible, pool),
        total_payout=math.fsum(e.payable_reward for e in eligible),
    )


def format_reward(amount: float) -> str:
    """Whole dollars from $1 up, cents below. Halves round away from zero."""
    places = Decimal("1") if amount >= 1 else Decimal("0.01")
    value = Decimal(amount).quantize(places, rounding=ROUND_HALF_UP)
    return f"${value}"
