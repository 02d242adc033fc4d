"""Account-level operations: deletion and anonymous identity linking."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from quote_stage.core.errors import ForbiddenError, UnauthorizedError, ValidationError
from quote_stage.db.session import transaction
from quote_stage.models import User
from quote_stage.repositories.quote_repo import QuoteRepository
from quote_stage.services.vote_ledger import retract_all_votes

logger = logging.getLogger(__name__)


def delete_account(db: Session, user: User | None) -> None:
    """Delete ``user``, keeping every like counter consistent.

    The user's votes are retracted with compensating counter deltas and
    their quotes become unowned, all in one transaction.
    """
    if user is None:
        raise UnauthorizedError()

    user_id = user.id
    with transaction(db):
        retracted = retract_all_votes(db, user_id)
        db.delete(user)
        db.flush()

    logger.info("Deleted account %s (%d votes retracted)", user_id, retracted)


def link_anonymous_account(db: Session, anonymous: User | None, target: User | None) -> int:
    """Move quotes from an anonymous identity to a full account.

    Returns:
        Number of quotes reassigned.

    Raises:
        UnauthorizedError: Either identity is missing.
        ForbiddenError: The target is itself anonymous.
        ValidationError: The source identity is not anonymous or is the target.
    """
    if anonymous is None or target is None:
        raise UnauthorizedError()
    if target.is_anonymous:
        raise ForbiddenError("Only full accounts can adopt anonymous quotes")
    if not anonymous.is_anonymous:
        raise ValidationError("anonymous_token", "Token does not belong to an anonymous identity")
    if anonymous.id == target.id:
        raise ValidationError("anonymous_token", "Cannot link an identity to itself")

    with transaction(db):
        moved = QuoteRepository(db).reassign_owner(anonymous.id, target.id)

    logger.info("Linked anonymous %s into %s (%d quotes)", anonymous.id, target.id, moved)
    return moved
