# src/quote_stage/api/v1/endpoints/quotes.py
"""Quote-related endpoints for the Quote Stage API."""

from fastapi import APIRouter, BackgroundTasks, Depends, status

from quote_stage.models import Quote
from quote_stage.schemas.quote import QuoteCreate, QuoteResponse
from quote_stage.services import quote_service

from ..dependencies import (
    CurrentUserDep,
    NotifierDep,
    OriginDep,
    QuoteLimiterDep,
    SessionDep,
    require_human,
)

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post(
    "/",
    response_model=QuoteResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_human)],
)
def create_quote(
    payload: QuoteCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    origin: OriginDep,
    limiter: QuoteLimiterDep,
    notifier: NotifierDep,
    background_tasks: BackgroundTasks,
) -> Quote:
    """Submit a new quote. Anonymous identities are allowed."""
    quote = quote_service.create_quote(
        db,
        text=payload.quote,
        author=payload.author,
        owner=current_user,
        verified_id=current_user.id,
        origin=origin,
        limiter=limiter,
    )
    background_tasks.add_task(notifier.notify, "created", quote.id)
    return quote


@router.get("/{quote_id}", response_model=QuoteResponse)
def get_quote(quote_id: int, db: SessionDep) -> Quote:
    """Get a specific quote by ID."""
    return quote_service.get_quote(db, quote_id)


@router.delete(
    "/{quote_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_human)],
)
def delete_quote(
    quote_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
    notifier: NotifierDep,
    background_tasks: BackgroundTasks,
) -> None:
    """Delete a quote. Only its owner may do so."""
    quote_service.delete_quote(db, quote_id, current_user)
    background_tasks.add_task(notifier.notify, "deleted", quote_id)
