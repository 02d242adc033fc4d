"""Service-level helpers for creating and deleting quotes."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from quote_stage.core.errors import NotFoundError, UnauthorizedError, ValidationError
from quote_stage.core.settings import settings
from quote_stage.db.session import transaction
from quote_stage.models import Quote, User
from quote_stage.repositories.quote_repo import QuoteRepository
from quote_stage.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


def sanitize_text(value: str, field: str, max_length: int, label: str) -> str:
    """Trim ``value`` and reject it when empty or over ``max_length``."""
    trimmed = value.strip() if isinstance(value, str) else ""
    if not trimmed:
        raise ValidationError(field, f"{label} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(field, f"{label} is too long (max {max_length} characters)")
    return trimmed


def create_quote(
    db: Session,
    *,
    text: str,
    author: str,
    owner: User | None,
    verified_id: str | None,
    origin: str,
    limiter: RateLimiter,
) -> Quote:
    """Validate and persist a quote.

    Anonymous actors may create quotes. Validation and admission happen
    before the transaction opens.

    Args:
        db: Database session.
        text: Submitted quote text.
        author: Submitted attribution.
        owner: The creating user.
        verified_id: Identifier vouched for by the identity provider.
        origin: Caller's network origin.
        limiter: The quote creation limiter.

    Returns:
        The created quote.

    Raises:
        UnauthorizedError: Missing or mismatched identity.
        ValidationError: Empty or overlong text or attribution.
        RateLimitedError: Creation window exhausted.
    """
    if owner is None or verified_id is None or owner.id != verified_id:
        raise UnauthorizedError()

    clean_text = sanitize_text(text, "quote", settings.quote_max_length, "Quote")
    clean_author = sanitize_text(author, "author", settings.author_max_length, "Author")

    limiter.check(origin, owner.id).raise_for_limit()

    with transaction(db):
        quote = QuoteRepository(db).create(text=clean_text, author=clean_author, owner_id=owner.id)
    db.refresh(quote)
    logger.info("Quote %s created by %s", quote.id, owner.id)
    return quote


def get_quote(db: Session, quote_id: int) -> Quote:
    """Return the quote or raise ``NotFoundError``."""
    if quote_id < 1:
        raise ValidationError("quote_id", "Invalid quote ID")
    quote = QuoteRepository(db).get_by_id(quote_id)
    if quote is None:
        raise NotFoundError()
    return quote


def delete_quote(db: Session, quote_id: int, requester: User | None) -> None:
    """Delete a quote owned by ``requester``.

    Raises:
        ValidationError: Malformed quote id.
        UnauthorizedError: No identity, or the requester is not the owner.
        NotFoundError: The quote does not exist.
    """
    if requester is None:
        raise UnauthorizedError()
    if quote_id < 1:
        raise ValidationError("quote_id", "Invalid quote ID")

    with transaction(db):
        repo = QuoteRepository(db)
        quote = repo.get_by_id(quote_id)
        if quote is None:
            raise NotFoundError()
        if quote.user_id != requester.id:
            raise UnauthorizedError("You can only delete your own quotes")
        repo.delete(quote)

    logger.info("Quote %s deleted by %s", quote_id, requester.id)
