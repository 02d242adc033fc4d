# src/quote_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .feed import router as feed_router
from .quotes import router as quotes_router
from .users import router as users_router
from .votes import router as votes_router

__all__ = [
    "feed_router",
    "quotes_router",
    "users_router",
    "votes_router",
]
