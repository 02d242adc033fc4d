# src/quote_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .feed import FeedItem, FeedResponse
from .quote import QuoteCreate, QuoteResponse
from .user import LinkAnonymousRequest, LinkAnonymousResponse
from .vote import MyVoteResponse, VoteCreate, VoteResponse

__all__ = [
    "FeedItem", "FeedResponse",
    "QuoteCreate", "QuoteResponse",
    "LinkAnonymousRequest", "LinkAnonymousResponse",
    "MyVoteResponse", "VoteCreate", "VoteResponse",
]
