# src/quote_stage/schemas/quote.py
"""Quote-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class QuoteCreate(BaseModel):
    """Schema for submitting a new quote.

    Length limits are enforced after trimming by the service layer so the
    caps stay configurable.
    """

    quote: str = Field(..., description="Quote text")
    author: str = Field(..., description="Who the quote is attributed to")


class QuoteResponse(BaseModel):
    """Schema for quote information returned by the API."""

    id: int
    quote: str
    author: str
    likes: int
    user_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
