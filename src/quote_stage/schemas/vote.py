# src/quote_stage/schemas/vote.py
"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting a vote.

    Repeating the stored direction cancels the vote; the opposite direction
    switches it.
    """

    quote_id: int
    direction: Literal["up", "down"] = Field(..., description="'up' to like, 'down' to dislike")


class VoteResponse(BaseModel):
    """Post-transaction state of the voted quote."""

    quote_id: int
    likes: int
    my_vote: Literal[-1, 0, 1]


class MyVoteResponse(BaseModel):
    """The caller's stored vote; 0 means no vote."""

    direction: Literal[-1, 0, 1]
