"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from quote_stage.core.errors import UnauthorizedError
from quote_stage.core.security import decode_subject
from quote_stage.db.session import get_db
from quote_stage.models import User
from quote_stage.services.rate_limit import (
    UNKNOWN_ORIGIN,
    RateLimiter,
    get_quote_limiter,
    get_vote_limiter,
)
from quote_stage.services.signals import (
    BotSignal,
    FeedRefreshNotifier,
    get_bot_signal,
    get_feed_notifier,
)

# Missing credentials are reported through UnauthorizedError, not FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def resolve_user(db: Session, token: str) -> User:
    """Return the user named by a verified bearer token.

    Raises:
        UnauthorizedError: If the token is invalid or the user is unknown.
    """
    subject = decode_subject(token)
    if subject is None:
        raise UnauthorizedError("Could not validate credentials")
    user = db.get(User, subject)
    if user is None:
        raise UnauthorizedError("User not found")
    return user


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> User:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        UnauthorizedError: If the token is missing or invalid, or the user is not found
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    return resolve_user(db, credentials.credentials)


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Return the viewer when a bearer token is supplied, else None."""
    if credentials is None:
        return None
    return resolve_user(db, credentials.credentials)


def get_client_origin(request: Request) -> str:
    """Return the caller's network origin.

    Prefers the first hop of ``X-Forwarded-For``, then ``X-Real-IP``, then the
    socket peer.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_ORIGIN


def require_human(request: Request, bot_signal: Annotated[BotSignal, Depends(get_bot_signal)]) -> None:
    """Reject requests flagged by the abuse signal."""
    bot_signal.ensure_human(request.headers)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
OriginDep = Annotated[str, Depends(get_client_origin)]
QuoteLimiterDep = Annotated[RateLimiter, Depends(get_quote_limiter)]
VoteLimiterDep = Annotated[RateLimiter, Depends(get_vote_limiter)]
NotifierDep = Annotated[FeedRefreshNotifier, Depends(get_feed_notifier)]
