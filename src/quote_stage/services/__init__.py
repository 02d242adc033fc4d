# src/quote_stage/services/__init__.py
"""Business logic services for the Quote Stage application."""

from .rate_limit import RateLimiter, RateLimitResult, SlidingWindowRateLimiter, WindowPolicy
from .signals import BotSignal, FeedRefreshNotifier

__all__ = [
    "BotSignal",
    "FeedRefreshNotifier",
    "RateLimiter",
    "RateLimitResult",
    "SlidingWindowRateLimiter",
    "WindowPolicy",
]
