"""Vote ledger: one stored vote per (quote, voter) and the like counter.

Transition table for a repeated or reversed vote (stored value, requested
direction -> new stored value, counter delta):

    none  up    -> +1    +1
    none  down  -> -1    -1
    +1    up    -> none  -1
    +1    down  -> -1    -2
    -1    down  -> none  +1
    -1    up    -> +1    +2

The read-decide-write sequence runs in one transaction. The counter is
always changed with a relative ``likes = likes + delta`` update so that
concurrent votes by different voters on the same quote are never lost. Two
concurrent first votes by the same voter collide on the composite primary
key of ``quote_vote``; the loser is retried and then takes the update path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from quote_stage.core.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from quote_stage.core.settings import settings
from quote_stage.db.session import transaction
from quote_stage.models import Quote, QuoteVote, User
from quote_stage.models.vote import VOTE_DOWN, VOTE_UP
from quote_stage.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class VoteDirection(str, Enum):
    """Direction requested by a voter."""

    UP = "up"
    DOWN = "down"

    @property
    def value_int(self) -> int:
        return VOTE_UP if self is VoteDirection.UP else VOTE_DOWN


@dataclass(frozen=True)
class VoteTransition:
    """Resulting stored value (None deletes the row) and counter delta."""

    new_value: int | None
    delta: int


@dataclass(frozen=True)
class VoteOutcome:
    """Post-transaction state returned to callers."""

    quote_id: int
    likes: int
    my_vote: int


def decide_transition(stored: int | None, direction: VoteDirection) -> VoteTransition:
    """Return the transition for ``stored`` and the requested ``direction``."""
    requested = direction.value_int
    if stored is None:
        return VoteTransition(new_value=requested, delta=requested)
    if stored == requested:
        return VoteTransition(new_value=None, delta=-stored)
    return VoteTransition(new_value=requested, delta=requested - stored)


def _validate_quote_id(quote_id: object) -> int:
    if isinstance(quote_id, bool) or not isinstance(quote_id, int) or quote_id < 1:
        raise ValidationError("quote_id", "Invalid quote ID")
    return quote_id


def ensure_can_vote(voter: User | None, verified_id: str | None) -> User:
    """Check the voter identity before any write.

    Raises:
        UnauthorizedError: No verified identity, or it does not match ``voter``.
        ForbiddenError: The identity is anonymous.
    """
    if voter is None or verified_id is None or voter.id != verified_id:
        raise UnauthorizedError()
    if voter.is_anonymous:
        raise ForbiddenError(
            "Anonymous users cannot vote on quotes. Please sign in with a full account."
        )
    return voter


def _read_vote(db: Session, quote_id: int, voter_id: str) -> QuoteVote | None:
    return db.execute(
        select(QuoteVote)
        .where(QuoteVote.quote_id == quote_id, QuoteVote.user_id == voter_id)
        .with_for_update()
    ).scalar_one_or_none()


def _apply_delta(db: Session, quote_id: int, delta: int) -> int:
    db.execute(
        update(Quote)
        .where(Quote.id == quote_id)
        .values(likes=Quote.likes + delta)
        .execution_options(synchronize_session=False)
    )
    return db.execute(select(Quote.likes).where(Quote.id == quote_id)).scalar_one()


def _apply_once(db: Session, quote_id: int, voter_id: str, direction: VoteDirection) -> VoteOutcome:
    with transaction(db):
        exists = db.execute(select(Quote.id).where(Quote.id == quote_id)).scalar_one_or_none()
        if exists is None:
            raise NotFoundError()

        existing = _read_vote(db, quote_id, voter_id)
        stored = existing.value if existing is not None else None
        change = decide_transition(stored, direction)

        if existing is None:
            db.add(QuoteVote(quote_id=quote_id, user_id=voter_id, value=change.new_value))
        elif change.new_value is None:
            db.delete(existing)
        else:
            existing.value = change.new_value
        # Flush before the counter so a uniqueness violation aborts the whole unit.
        db.flush()

        likes = _apply_delta(db, quote_id, change.delta)

    logger.debug(
        "Vote quote=%s voter=%s %s -> %s (delta %+d, likes %d)",
        quote_id,
        voter_id,
        stored,
        change.new_value,
        change.delta,
        likes,
    )
    return VoteOutcome(quote_id=quote_id, likes=likes, my_vote=change.new_value or 0)


def apply_vote(
    db: Session,
    quote_id: int,
    voter: User | None,
    direction: VoteDirection | str,
    *,
    verified_id: str | None,
    origin: str,
    limiter: RateLimiter,
) -> VoteOutcome:
    """Record ``voter``'s vote on a quote and return the new counter.

    Preconditions are checked in order, before any write: quote id shape,
    voter identity, then rate limit admission.

    Args:
        db: Session the transaction runs on.
        quote_id: Positive quote identifier.
        voter: The acting user as loaded from the store.
        direction: ``up`` or ``down``.
        verified_id: Identifier vouched for by the identity provider.
        origin: Caller's network origin for admission control.
        limiter: Vote limiter instance.

    Returns:
        The quote's ``likes`` after the transaction and the caller's stored vote.

    Raises:
        ValidationError: Malformed quote id or direction.
        UnauthorizedError: Missing or mismatched identity.
        ForbiddenError: Anonymous voter.
        RateLimitedError: Admission window exhausted.
        NotFoundError: The quote does not exist.
        ConflictError: Write conflicts outlived the retry budget.
        InternalError: Unexpected store failure.
    """
    quote_id = _validate_quote_id(quote_id)
    try:
        direction = VoteDirection(direction)
    except ValueError as exc:
        raise ValidationError("direction", "direction must be 'up' or 'down'") from exc
    voter = ensure_can_vote(voter, verified_id)
    voter_id = voter.id
    limiter.check(origin, voter_id).raise_for_limit()

    attempts = settings.vote_conflict_retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return _apply_once(db, quote_id, voter_id, direction)
        except (IntegrityError, OperationalError) as exc:
            logger.warning(
                "Vote write conflict on quote %s for %s (attempt %d/%d): %s",
                quote_id,
                voter_id,
                attempt,
                attempts,
                exc.__class__.__name__,
            )
        except SQLAlchemyError as exc:
            logger.error("Vote transaction failed for quote %s", quote_id, exc_info=True)
            raise InternalError(str(exc)) from exc

    raise ConflictError()


def get_vote(db: Session, quote_id: int, voter_id: str) -> int:
    """Return the stored vote value, or 0 when there is none."""
    value = db.execute(
        select(QuoteVote.value).where(
            QuoteVote.quote_id == quote_id,
            QuoteVote.user_id == voter_id,
        )
    ).scalar_one_or_none()
    return value or 0


def retract_all_votes(db: Session, voter_id: str) -> int:
    """Remove every vote by ``voter_id`` and compensate each counter.

    Must run inside the caller's transaction. Returns the number of votes
    removed.
    """
    votes = db.execute(
        select(QuoteVote.quote_id, QuoteVote.value)
        .where(QuoteVote.user_id == voter_id)
        .with_for_update()
    ).all()
    for quote_id, value in votes:
        _apply_delta(db, quote_id, -value)
    db.execute(
        delete(QuoteVote)
        .where(QuoteVote.user_id == voter_id)
        .execution_options(synchronize_session=False)
    )
    return len(votes)
