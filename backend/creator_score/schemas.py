import math
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, ValidationInfo, computed_field, field_validator

from creator_score.exceptions import InvalidScoreError


class RewardsDecision(str, Enum):
    OPTED_IN = "opted_in"
    OPTED_OUT = "opted_out"


def check_score(entry_id: str, score: object) -> None:
    """Raise InvalidScoreError naming the entry for a negative, NaN or non-numeric score."""
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise InvalidScoreError(entry_id, score)
    if math.isnan(score) or score < 0:
        raise InvalidScoreError(entry_id, score)


class ScoredEntry(BaseModel):
    id: str = Field(min_length=1)
    display_name: str = "Unknown"
    avatar_url: str | None = None
    score: int = Field(ge=0)

    model_config = {"frozen": True}

    @field_validator("score", mode="before")
    @classmethod
    def _score_is_valid(cls, value: object, info: ValidationInfo) -> object:
        check_score(info.data.get("id", "<unknown>"), value)
        return value


class RankedEntry(ScoredEntry):
    rank: int = Field(ge=1)
    is_boosted: bool = False
    decision: RewardsDecision | None = None
    base_reward: float = 0.0
    final_reward: float = 0.0

    @computed_field
    @property
    def is_opted_out(self) -> bool:
        return self.decision is RewardsDecision.OPTED_OUT

    @computed_field
    @property
    def is_opted_in(self) -> bool:
        return self.decision is RewardsDecision.OPTED_IN

    @computed_field
    @property
    def is_undecided(self) -> bool:
        return self.decision is None

    @computed_field
    @property
    def payable_reward(self) -> float:
        """Amount actually drawn from the pool; opted-out creators draw nothing."""
        return 0.0 if self.is_opted_out else self.final_reward


class RewardPool(BaseModel):
    total_pool_amount: float = Field(ge=0)
    boost_multiplier: float = Field(default=0.10, ge=0)
    token_holder_threshold: int = Field(default=100, ge=0)
    eligible_rank_cutoff: int = Field(default=200, ge=1)

    model_config = {"frozen": True}


class OptOutDecision(BaseModel):
    talent_uuid: str
    decision: RewardsDecision
    decision_made_at: datetime | None = None


class ScoreSnapshot(BaseModel):
    entries: list[ScoredEntry]
    fetched_at: datetime
    complete: bool = True


class RewardsSummary(BaseModel):
    total_pool: float
    eligible_creators: int = 0
    opted_out_creators: int = 0
    boosted_creators: int = 0
    donated_amount: float = 0.0
    total_payout: float = 0.0


class Leaderboard(BaseModel):
    entries: list[RankedEntry]
    summary: RewardsSummary
    complete: bool = True
    fetched_at: datetime


class LeaderboardEntryOut(RankedEntry):
    reward_display: str


class LeaderboardPage(BaseModel):
    entries: list[LeaderboardEntryOut]
    page: int
    per_page: int
    total: int
    summary: RewardsSummary
    complete: bool
    fetched_at: datetime


class LeaderboardStats(BaseModel):
    min_score: int | None = None
    total_creators: int = 0
    eligible_creators: int = 0


class DecisionRequest(BaseModel):
    talent_uuid: UUID
    rewards_decision: RewardsDecision


class OptOutRequest(BaseModel):
    talent_uuid: UUID
    confirm_optout: bool = False


class DecisionStatus(BaseModel):
    talent_uuid: str
    rewards_decision: RewardsDecision | None = None
    decision_made_at: datetime | None = None


class SnapshotRow(BaseModel):
    talent_uuid: str
    rank: int
    rewards_amount: float
    created_at: str | None = None


class SnapshotResponse(BaseModel):
    snapshots: list[SnapshotRow]
    total_count: int
    created_at: str | None = None
