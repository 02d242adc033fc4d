"""Feed query resolution and pagination.

A feed request is resolved once into an immutable ``FeedQuery`` and then
paged uniformly. Time and like sorts use keyset pagination (rows strictly
after the cursor row, id as tiebreaker); the ``default`` sort pages a
seeded permutation of the whole filtered set by integer offset.

Known limitation: inserts or deletes between two ``default`` page fetches
shift offsets in the permutation, so a paging session may show a row twice
or skip one.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import ColumnElement, and_, or_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from quote_stage.core.errors import ValidationError
from quote_stage.core.settings import settings
from quote_stage.models import Quote, QuoteVote
from quote_stage.services import shuffle

logger = logging.getLogger(__name__)


class FeedFilter(str, Enum):
    """Which quotes are included in the feed."""

    ALL = "all"
    LIKES = "likes"
    DISLIKES = "dislikes"
    AUTHOR = "author"


class FeedSort(str, Enum):
    """How the filtered quotes are ordered."""

    NEW = "new"
    OLD = "old"
    MOST = "most"
    LEAST = "least"
    DEFAULT = "default"


@dataclass(frozen=True)
class _SortSpec:
    column: str
    descending: bool


_KEYSET_SORTS: dict[FeedSort, _SortSpec] = {
    FeedSort.NEW: _SortSpec("created_at", descending=True),
    FeedSort.OLD: _SortSpec("created_at", descending=False),
    FeedSort.MOST: _SortSpec("likes", descending=True),
    FeedSort.LEAST: _SortSpec("likes", descending=False),
}


@dataclass(frozen=True)
class FeedQuery:
    """Validated filter and sort for one feed request."""

    filter: FeedFilter
    sort: FeedSort
    author: str | None = None

    @property
    def is_shuffled(self) -> bool:
        return self.sort is FeedSort.DEFAULT

    def seed_params(self) -> dict[str, str]:
        """Filter parameters that seed the ``default`` permutation.

        The author value is the trimmed one, so padded and unpadded requests
        share a permutation.
        """
        params = {"filterType": self.filter.value}
        if self.author is not None:
            params["authorFilter"] = self.author
        return params

    def predicate(self) -> ColumnElement[bool] | None:
        """Return the SQL predicate for the filter, or None for ``all``."""
        if self.filter is FeedFilter.LIKES:
            return Quote.likes > 0
        if self.filter is FeedFilter.DISLIKES:
            return Quote.likes < 0
        if self.filter is FeedFilter.AUTHOR and self.author is not None:
            # Quote the LIKE metacharacters so user input matches literally.
            return Quote.author.icontains(self.author, autoescape=True)
        return None


@dataclass
class FeedPage:
    """One bounded page of quotes plus the cursor for the next one."""

    items: list[Quote]
    next_cursor: int | None
    has_more: bool
    my_votes: dict[int, int] = field(default_factory=dict)


def _parse_enum(enum_cls: type[Enum], value: object, field_name: str) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(field_name, f"Invalid {field_name} (expected one of: {allowed})") from exc


def sanitize_author(value: str) -> str:
    """Trim ``value`` and validate it against the author length cap."""
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError("author", "Author filter cannot be empty")
    if len(trimmed) > settings.author_max_length:
        raise ValidationError(
            "author",
            f"Author filter is too long (max {settings.author_max_length} characters)",
        )
    return trimmed


def resolve_query(
    filter_value: FeedFilter | str,
    sort_value: FeedSort | str,
    author: str | None = None,
) -> FeedQuery:
    """Validate a filter/sort combination and build the query descriptor.

    Args:
        filter_value: One of the ``FeedFilter`` values.
        sort_value: One of the ``FeedSort`` values.
        author: Substring to match against attributions; required for the
            ``author`` filter and ignored otherwise.

    Returns:
        The immutable query descriptor consumed by ``paginate``.

    Raises:
        ValidationError: Naming ``filter``, ``sort`` or ``author``.
    """
    feed_filter = _parse_enum(FeedFilter, filter_value, "filter")
    feed_sort = _parse_enum(FeedSort, sort_value, "sort")

    resolved_author: str | None = None
    if feed_filter is FeedFilter.AUTHOR:
        if author is None:
            raise ValidationError("author", "Author filter requires an author value")
        resolved_author = sanitize_author(author)

    return FeedQuery(filter=feed_filter, sort=feed_sort, author=resolved_author)  # type: ignore[arg-type]


def validate_limit(limit: int) -> int:
    """Return ``limit`` if it lies in the configured page size range."""
    if not isinstance(limit, int) or not settings.feed_min_limit <= limit <= settings.feed_max_limit:
        raise ValidationError(
            "limit",
            f"limit must be between {settings.feed_min_limit} and {settings.feed_max_limit}",
        )
    return limit


def _filtered(query: FeedQuery):
    stmt = select(Quote)
    predicate = query.predicate()
    if predicate is not None:
        stmt = stmt.where(predicate)
    return stmt


def _page_from_rows(rows: Sequence[Quote], limit: int, next_cursor: int | None) -> FeedPage:
    if len(rows) > limit:
        return FeedPage(items=list(rows[:limit]), next_cursor=next_cursor, has_more=True)
    return FeedPage(items=list(rows), next_cursor=None, has_more=False)


def _keyset_page(db: Session, query: FeedQuery, cursor: int | None, limit: int) -> FeedPage:
    sort_spec = _KEYSET_SORTS[query.sort]
    key: InstrumentedAttribute = getattr(Quote, sort_spec.column)
    stmt = _filtered(query)

    if cursor is not None:
        if cursor < 1:
            raise ValidationError("cursor", "cursor must be a positive quote id")
        cursor_key = db.execute(select(key).where(Quote.id == cursor)).scalar_one_or_none()
        if cursor_key is None:
            raise ValidationError("cursor", "cursor does not reference an existing quote")
        if sort_spec.descending:
            after = or_(key < cursor_key, and_(key == cursor_key, Quote.id < cursor))
        else:
            after = or_(key > cursor_key, and_(key == cursor_key, Quote.id > cursor))
        stmt = stmt.where(after)

    if sort_spec.descending:
        stmt = stmt.order_by(key.desc(), Quote.id.desc())
    else:
        stmt = stmt.order_by(key.asc(), Quote.id.asc())

    rows = db.execute(stmt.limit(limit + 1)).scalars().all()
    next_cursor = rows[limit - 1].id if len(rows) > limit else None
    return _page_from_rows(rows, limit, next_cursor)


def _shuffled_page(db: Session, query: FeedQuery, cursor: int | None, limit: int) -> FeedPage:
    offset = cursor or 0
    if offset < 0:
        raise ValidationError("cursor", "cursor must be a non-negative offset")

    rows = db.execute(_filtered(query).order_by(Quote.id.asc())).scalars().all()
    ordered = shuffle.permutation(rows, query.seed_params())
    window = ordered[offset : offset + limit + 1]
    return _page_from_rows(window, limit, offset + limit)


def paginate(
    db: Session,
    query: FeedQuery,
    cursor: int | None = None,
    limit: int | None = None,
) -> FeedPage:
    """Return one page of quotes for ``query``.

    Fetches ``limit + 1`` rows so a further page is detected without a second
    round trip. For keyset sorts the cursor is the id of the last quote
    served; for the ``default`` sort it is an offset into the permutation.
    """
    page_size = validate_limit(settings.feed_default_limit if limit is None else limit)
    if query.is_shuffled:
        return _shuffled_page(db, query, cursor, page_size)
    return _keyset_page(db, query, cursor, page_size)


def viewer_votes(db: Session, viewer_id: str, quote_ids: Sequence[int]) -> dict[int, int]:
    """Return the viewer's stored vote per quote id (absent means no vote)."""
    if not quote_ids:
        return {}
    rows = db.execute(
        select(QuoteVote.quote_id, QuoteVote.value).where(
            QuoteVote.user_id == viewer_id,
            QuoteVote.quote_id.in_(quote_ids),
        )
    ).all()
    return {quote_id: value for quote_id, value in rows}


def get_feed(
    db: Session,
    query: FeedQuery,
    cursor: int | None = None,
    limit: int | None = None,
    viewer_id: str | None = None,
) -> FeedPage:
    """Page the feed and attach the viewer's own votes when a viewer is known."""
    page = paginate(db, query, cursor, limit)
    if viewer_id is not None:
        page.my_votes = viewer_votes(db, viewer_id, [quote.id for quote in page.items])
    logger.debug(
        "Feed page filter=%s sort=%s cursor=%s -> %d items (has_more=%s)",
        query.filter.value,
        query.sort.value,
        cursor,
        len(page.items),
        page.has_more,
    )
    return page
