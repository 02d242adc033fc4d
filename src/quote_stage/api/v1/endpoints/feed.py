# src/quote_stage/api/v1/endpoints/feed.py
"""Feed endpoint for listing quotes with filters, sorts and cursors."""

from fastapi import APIRouter, Query

from quote_stage.core.settings import settings
from quote_stage.schemas.feed import FeedItem, FeedResponse
from quote_stage.services.feed import get_feed, resolve_query

from ..dependencies import OptionalUserDep, SessionDep

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("/", response_model=FeedResponse)
def read_feed(
    db: SessionDep,
    viewer: OptionalUserDep,
    filter_type: str = Query("all", alias="filter", description="all, likes, dislikes or author"),
    sort: str = Query("default", description="new, old, most, least or default"),
    author: str | None = Query(None, description="Attribution substring for the author filter"),
    cursor: int | None = Query(None, description="next_cursor from the previous page"),
    limit: int = Query(settings.feed_default_limit, description="Page size"),
) -> FeedResponse:
    """Return one page of the feed.

    Cursors from the ``default`` sort are offsets and cannot be reused with
    the other sorts, nor the other way round.
    """
    query = resolve_query(filter_type, sort, author)
    page = get_feed(
        db,
        query,
        cursor=cursor,
        limit=limit,
        viewer_id=viewer.id if viewer is not None else None,
    )
    items = [
        FeedItem.model_validate(quote).model_copy(update={"my_vote": page.my_votes.get(quote.id, 0)})
        for quote in page.items
    ]
    return FeedResponse(items=items, next_cursor=page.next_cursor, has_more=page.has_more)
