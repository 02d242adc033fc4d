"""Data access helpers for working with quotes."""
from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from quote_stage.models.quote import Quote

__all__ = ["QuoteRepository"]


class QuoteRepository:
    """Thin wrapper around database access for quote entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, quote_id: int) -> Quote | None:
        """Return a quote by identifier."""
        return self.session.execute(select(Quote).where(Quote.id == quote_id)).scalars().first()

    def create(self, *, text: str, author: str, owner_id: str | None) -> Quote:
        """Insert a new quote and return the persisted ORM instance.

        Args:
            text: Sanitized quote text.
            author: Sanitized attribution.
            owner_id: Identifier of the creating actor.
        """
        quote = Quote(quote=text, author=author, user_id=owner_id, likes=0)
        self.session.add(quote)
        self.session.flush()
        return quote

    def delete(self, quote: Quote) -> None:
        """Delete a quote together with its votes."""
        self.session.delete(quote)
        self.session.flush()

    def reassign_owner(self, from_user_id: str, to_user_id: str) -> int:
        """Move every quote owned by ``from_user_id`` to ``to_user_id``."""
        result = self.session.execute(
            update(Quote)
            .where(Quote.user_id == from_user_id)
            .values(user_id=to_user_id)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
