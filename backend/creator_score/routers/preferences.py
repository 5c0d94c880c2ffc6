"""
Rewards decision ("Pay It Forward") routes.

A creator decides once: opted in keeps their share, opted out pays it
forward to the rest of the eligible creators. Either choice is final.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from creator_score.decisions import DecisionStore
from creator_score.dependencies import get_decision_store, get_leaderboard_service
from creator_score.exceptions import DecisionAlreadyMadeError, StorageError
from creator_score.leaderboard_service import LeaderboardService
from creator_score.schemas import (
    DecisionRequest,
    DecisionStatus,
    OptOutRequest,
    RewardsDecision,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/user-preferences", tags=["user-preferences"])


def _record(
    talent_uuid: str,
    decision: RewardsDecision,
    store: DecisionStore,
    service: LeaderboardService,
) -> DecisionStatus:
    try:
        recorded = store.record(talent_uuid, decision)
    except DecisionAlreadyMadeError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Rewards decision already made: {e.existing}",
        ) from e
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update rewards decision",
        ) from e
    service.invalidate_decisions()
    return DecisionStatus(
        talent_uuid=recorded.talent_uuid,
        rewards_decision=recorded.decision,
        decision_made_at=recorded.decision_made_at,
    )


@router.get("/decision", response_model=DecisionStatus)
def get_decision(
    talent_uuid: UUID = Query(...),
    store: DecisionStore = Depends(get_decision_store),
):
    decision = store.get(str(talent_uuid))
    if decision is None:
        return DecisionStatus(talent_uuid=str(talent_uuid))
    return DecisionStatus(
        talent_uuid=decision.talent_uuid,
        rewards_decision=decision.decision,
        decision_made_at=decision.decision_made_at,
    )


@router.post("/decision", response_model=DecisionStatus)
def record_decision(
    body: DecisionRequest,
    store: DecisionStore = Depends(get_decision_store),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    logger.info("record_decision: talent_uuid=%s decision=%s", body.talent_uuid, body.rewards_decision.value)
    return _record(str(body.talent_uuid), body.rewards_decision, store, service)


@router.post("/optout", response_model=DecisionStatus)
def opt_out(
    body: OptOutRequest,
    store: DecisionStore = Depends(get_decision_store),
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    if not body.confirm_optout:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Must confirm opt-out decision",
        )
    return _record(str(body.talent_uuid), RewardsDecision.OPTED_OUT, store, service)


@router.get("/opted-out-percentage")
def get_opted_out_percentage(store: DecisionStore = Depends(get_decision_store)):
    return {"percentage": store.opted_out_percentage()}
