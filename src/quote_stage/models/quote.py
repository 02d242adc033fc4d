# src/quote_stage/models/quote.py
"""SQLAlchemy model for quotes."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quote_stage.db.session import Base
from quote_stage.db.time import utcnow

if TYPE_CHECKING:
    from .user import User
    from .vote import QuoteVote


class Quote(Base):
    """A short text item with an attribution and a denormalized like counter.

    ``likes`` always equals the sum of the stored vote values for this quote.
    It is only ever changed through relative updates issued by the vote
    ledger, never recomputed in the request path.
    """

    __tablename__ = "quote"
    __table_args__ = (
        Index("ix_quote_created_at_id", "created_at", "id"),
        Index("ix_quote_likes_id", "likes", "id"),
        # Ids are never reused after a delete, so cursors keep naming one quote.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    # Unowned quotes exist (owner deleted their account).
    user_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    user: Mapped[User | None] = relationship("User", back_populates="quotes")
    votes: Mapped[list[QuoteVote]] = relationship(
        "QuoteVote",
        back_populates="quote",
        cascade="all, delete-orphan",
    )
