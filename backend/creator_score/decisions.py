"""
Rewards decisions ("Pay It Forward") stored in Supabase.

Table ``user_preferences`` keyed by ``talent_uuid``:

    talent_uuid       text primary key,
    rewards_decision  text check (rewards_decision in ('opted_in', 'opted_out')),
    decision_made_at  timestamptz,
    updated_at        timestamptz not null default now()

Both decisions are final: a creator who decided cannot switch sides.
"""
import logging
import math
from datetime import datetime, timezone

from supabase import Client

from creator_score.exceptions import DecisionAlreadyMadeError, StorageError
from creator_score.schemas import OptOutDecision, RewardsDecision

logger = logging.getLogger(__name__)

TABLE = "user_preferences"
COLUMNS = "talent_uuid, rewards_decision, decision_made_at"


def _to_decision(row: dict) -> OptOutDecision | None:
    if not row.get("rewards_decision"):
        return None
    return OptOutDecision(
        talent_uuid=row["talent_uuid"],
        decision=row["rewards_decision"],
        decision_made_at=row.get("decision_made_at"),
    )


class DecisionStore:
    def __init__(self, client: Client):
        self.client = client

    def get_all(self) -> dict[str, OptOutDecision]:
        rows = (
            self.client.table(TABLE)
            .select(COLUMNS)
            .in_("rewards_decision", [d.value for d in RewardsDecision])
            .execute()
        )
        decisions = {}
        for row in rows.data or []:
            decision = _to_decision(row)
            if decision:
                decisions[decision.talent_uuid] = decision
        return decisions

    def get(self, talent_uuid: str) -> OptOutDecision | None:
        rows = (
            self.client.table(TABLE)
            .select(COLUMNS)
            .eq("talent_uuid", talent_uuid)
            .limit(1)
            .execute()
        )
        if not rows.data:
            return None
        return _to_decision(rows.data[0])

    def record(self, talent_uuid: str, decision: RewardsDecision) -> OptOutDecision:
        """Store a decision once. Repeating the same decision returns the stored one."""
        decision = RewardsDecision(decision)
        existing = self.get(talent_uuid)
        if existing:
            if existing.decision is decision:
                return existing
            raise DecisionAlreadyMadeError(talent_uuid, existing.decision.value)

        now = datetime.now(timezone.utc).isoformat()
        row = (
            self.client.table(TABLE)
            .upsert(
                {
                    "talent_uuid": talent_uuid,
                    "rewards_decision": decision.value,
                    "decision_made_at": now,
                    "updated_at": now,
                },
                on_conflict="talent_uuid",
            )
            .execute()
        )
        if not row.data:
            raise StorageError(f"Failed to record rewards decision for {talent_uuid}")
        logger.info("Recorded rewards decision %s for %s", decision.value, talent_uuid)
        return _to_decision(row.data[0])

    def opted_out_percentage(self) -> int:
        """Share of decided creators who opted out, rounded half up. 0 when nobody decided."""
        decisions = self.get_all()
        if not decisions:
            return 0
        opted_out = sum(1 for d in decisions.values() if d.decision is RewardsDecision.OPTED_OUT)
        return math.floor(opted_out * 100 / len(decisions) + 0.5)
