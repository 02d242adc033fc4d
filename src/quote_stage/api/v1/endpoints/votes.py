# src/quote_stage/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Quote Stage API."""

from fastapi import APIRouter, Depends, status

from quote_stage.schemas.vote import MyVoteResponse, VoteCreate, VoteResponse
from quote_stage.services import vote_ledger

from ..dependencies import CurrentUserDep, OriginDep, SessionDep, VoteLimiterDep, require_human

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post(
    "/",
    response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_human)],
)
def cast_vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    origin: OriginDep,
    limiter: VoteLimiterDep,
) -> VoteResponse:
    """Cast, switch or cancel a vote and return the quote's new like count."""
    outcome = vote_ledger.apply_vote(
        db,
        vote_data.quote_id,
        current_user,
        vote_data.direction,
        verified_id=current_user.id,
        origin=origin,
        limiter=limiter,
    )
    return VoteResponse(quote_id=outcome.quote_id, likes=outcome.likes, my_vote=outcome.my_vote)


@router.get("/{quote_id}/my-vote", response_model=MyVoteResponse)
def get_my_vote(
    quote_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MyVoteResponse:
    """Get current user's vote on a specific quote."""
    return MyVoteResponse(direction=vote_ledger.get_vote(db, quote_id, current_user.id))
