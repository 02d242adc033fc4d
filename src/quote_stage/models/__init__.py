# src/quote_stage/models/__init__.py
"""SQLAlchemy models for the Quote Stage application."""

from .quote import Quote
from .user import User
from .vote import QuoteVote

__all__ = ["Quote", "QuoteVote", "User"]
