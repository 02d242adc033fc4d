"""Collaborator signals consumed or emitted by the core.

- ``BotSignal`` reads the abuse verdict that the edge proxy attaches to each
  request. A positive verdict rejects the call with ``ForbiddenError``.
- ``FeedRefreshNotifier`` tells dependent views that cached feed pages are
  stale after a quote is created or deleted. It is fire-and-forget: failures
  are logged and never reach the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from quote_stage.core.errors import ForbiddenError
from quote_stage.core.settings import settings

logger = logging.getLogger(__name__)

_POSITIVE_VERDICTS = frozenset({"bot", "1", "true", "yes"})


class BotSignal:
    """Abuse verdict evaluated before admission."""

    def __init__(self, header_name: str | None = None) -> None:
        self.header_name = (header_name or settings.bot_signal_header).lower()

    def is_bot(self, headers: Mapping[str, str]) -> bool:
        """Return True when the upstream verdict flags the request."""
        verdict = headers.get(self.header_name)
        return verdict is not None and verdict.strip().lower() in _POSITIVE_VERDICTS

    def ensure_human(self, headers: Mapping[str, str]) -> None:
        """Raise ``ForbiddenError`` for requests flagged as automated."""
        if self.is_bot(headers):
            logger.info("Rejected request flagged by abuse signal")
            raise ForbiddenError()


class FeedRefreshNotifier:
    """Emit feed invalidation events after quote creation and deletion."""

    def __init__(self, webhook_url: str | None = None, timeout: float | None = None) -> None:
        self.webhook_url = webhook_url if webhook_url is not None else settings.feed_refresh_webhook_url
        self.timeout = timeout if timeout is not None else settings.feed_refresh_timeout_seconds

    def build_event(self, action: str, quote_id: int) -> dict[str, Any]:
        return {"event": "feed.refresh", "action": action, "quote_id": quote_id}

    async def notify(self, action: str, quote_id: int) -> None:
        """Send one invalidation event. Never raises."""
        event = self.build_event(action, quote_id)
        logger.debug("Feed refresh: %s", event)
        if not self.webhook_url:
            return
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.webhook_url, json=event)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Feed refresh notification failed for quote %s: %s", quote_id, exc)


_BOT_SIGNAL = BotSignal()
_NOTIFIER = FeedRefreshNotifier()


def get_bot_signal() -> BotSignal:
    """Return the shared abuse signal reader."""
    return _BOT_SIGNAL


def get_feed_notifier() -> FeedRefreshNotifier:
    """Return the shared feed refresh notifier."""
    return _NOTIFIER
