# src/quote_stage/schemas/user.py
"""User account schemas."""

from pydantic import BaseModel, Field


class LinkAnonymousRequest(BaseModel):
    """Proof of control over an anonymous identity."""

    anonymous_token: str = Field(..., min_length=1, description="Bearer token of the anonymous identity")


class LinkAnonymousResponse(BaseModel):
    """Number of quotes moved to the caller."""

    reassigned: int
