# src/quote_stage/schemas/feed.py
"""Feed page schemas."""

from pydantic import BaseModel, Field

from .quote import QuoteResponse


class FeedItem(QuoteResponse):
    """A quote as seen by a particular viewer."""

    my_vote: int = Field(0, description="Viewer's vote: 1, -1, or 0 when none or anonymous")


class FeedResponse(BaseModel):
    """One page of the feed.

    ``next_cursor`` is a quote id for time and like sorts, and an offset into
    the shuffled order for the default sort. The two are not interchangeable.
    """

    items: list[FeedItem]
    next_cursor: int | None
    has_more: bool
