# src/quote_stage/api/v1/endpoints/users.py
"""Account endpoints for the Quote Stage API."""

from fastapi import APIRouter, Depends, status

from quote_stage.schemas.user import LinkAnonymousRequest, LinkAnonymousResponse
from quote_stage.services import user_service

from ..dependencies import CurrentUserDep, SessionDep, require_human, resolve_user

router = APIRouter(prefix="/users", tags=["users"])


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_human)],
)
def delete_me(current_user: CurrentUserDep, db: SessionDep) -> None:
    """Delete the caller's account; their quotes stay, unowned."""
    user_service.delete_account(db, current_user)


@router.post(
    "/me/link-anonymous",
    response_model=LinkAnonymousResponse,
    dependencies=[Depends(require_human)],
)
def link_anonymous(
    payload: LinkAnonymousRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LinkAnonymousResponse:
    """Adopt the quotes of an anonymous identity the caller controls."""
    anonymous = resolve_user(db, payload.anonymous_token)
    moved = user_service.link_anonymous_account(db, anonymous, current_user)
    return LinkAnonymousResponse(reassigned=moved)
