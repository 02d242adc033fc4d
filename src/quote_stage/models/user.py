# src/quote_stage/models/user.py
"""SQLAlchemy model for identities supplied by the identity provider."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quote_stage.db.session import Base
from quote_stage.db.time import utcnow

if TYPE_CHECKING:
    from .quote import Quote


class User(Base):
    """Verified actor.

    Anonymous actors may create quotes but never vote.
    """

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    quotes: Mapped[list[Quote]] = relationship("Quote", back_populates="user")
