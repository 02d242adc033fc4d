# src/quote_stage/models/vote.py
"""Models capturing voting interactions on quotes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quote_stage.db.session import Base

if TYPE_CHECKING:
    from .quote import Quote

VOTE_UP = 1
VOTE_DOWN = -1


class QuoteVote(Base):
    """Per-user vote on a quote.

    Absence of a row means "no vote"; a stored value is always +1 or -1.
    """

    __tablename__ = "quote_vote"
    __table_args__ = (
        CheckConstraint("value IN (1, -1)", name="ck_quote_vote_value"),
        Index("ix_quote_vote_user_id", "user_id"),
    )

    quote_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("quote.id", ondelete="CASCADE"),
        primary_key=True,
    )

    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Composite primary key prevents duplicate votes from the same user.

    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    quote: Mapped[Quote] = relationship("Quote", back_populates="votes")
