# tests/test_quote_service.py
"""Tests for quote creation and deletion plus account-level operations."""

import pytest

from quote_stage.core.errors import (
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
    ValidationError,
)
from quote_stage.models import Quote, QuoteVote, User
from quote_stage.services import quote_service, user_service, vote_ledger
from quote_stage.services.rate_limit import SlidingWindowRateLimiter, WindowPolicy

from tests.conftest import FakeClock, current_likes, generous_limiter

ORIGIN = "198.51.100.7"


def _create(db, user, text="Know thyself.", author="Socrates", limiter=None):
    return quote_service.create_quote(
        db,
        text=text,
        author=author,
        owner=user,
        verified_id=user.id,
        origin=ORIGIN,
        limiter=limiter or generous_limiter(),
    )


def test_create_quote_trims_and_persists(db_session, test_user) -> None:
    quote = _create(db_session, test_user, text="  Know thyself.  ", author=" Socrates ")

    assert quote.id is not None
    assert quote.quote == "Know thyself."
    assert quote.author == "Socrates"
    assert quote.likes == 0
    assert quote.user_id == test_user.id
    assert quote.created_at is not None


def test_anonymous_identity_may_create_quotes(db_session, anonymous_user) -> None:
    quote = _create(db_session, anonymous_user)
    assert quote.user_id == anonymous_user.id


@pytest.mark.parametrize(
    "text, author, field",
    [
        ("   ", "Socrates", "quote"),
        ("x" * 1001, "Socrates", "quote"),
        ("Know thyself.", "", "author"),
        ("Know thyself.", "y" * 101, "author"),
    ],
)
def test_create_quote_validation(db_session, test_user, text, author, field) -> None:
    with pytest.raises(ValidationError) as excinfo:
        _create(db_session, test_user, text=text, author=author)
    assert excinfo.value.field == field
    assert db_session.query(Quote).count() == 0


def test_create_quote_accepts_limits_exactly(db_session, test_user) -> None:
    quote = _create(db_session, test_user, text="x" * 1000, author="y" * 100)
    assert len(quote.quote) == 1000


def test_create_quote_requires_matching_identity(db_session, test_user, other_user) -> None:
    with pytest.raises(UnauthorizedError):
        quote_service.create_quote(
            db_session,
            text="Know thyself.",
            author="Socrates",
            owner=test_user,
            verified_id=other_user.id,
            origin=ORIGIN,
            limiter=generous_limiter(),
        )


def test_create_quote_rate_limit(db_session, test_user) -> None:
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(origin_policy=WindowPolicy(2, 300), clock=clock)
    _create(db_session, test_user, limiter=limiter)
    clock.advance(10)
    _create(db_session, test_user, limiter=limiter)
    clock.advance(10)

    with pytest.raises(RateLimitedError) as excinfo:
        _create(db_session, test_user, limiter=limiter)

    assert excinfo.value.retry_after == 280
    assert db_session.query(Quote).count() == 2


def test_get_quote(db_session, test_quote) -> None:
    assert quote_service.get_quote(db_session, test_quote.id).id == test_quote.id

    with pytest.raises(NotFoundError):
        quote_service.get_quote(db_session, test_quote.id + 100)

    with pytest.raises(ValidationError):
        quote_service.get_quote(db_session, 0)


def test_owner_can_delete_quote_and_votes_go_with_it(db_session, test_quote, test_user, other_user) -> None:
    quote_id = test_quote.id
    vote_ledger.apply_vote(
        db_session,
        quote_id,
        other_user,
        "up",
        verified_id=other_user.id,
        origin=ORIGIN,
        limiter=generous_limiter(),
    )

    quote_service.delete_quote(db_session, quote_id, test_user)

    db_session.expire_all()
    assert db_session.get(Quote, quote_id) is None
    assert db_session.query(QuoteVote).filter(QuoteVote.quote_id == quote_id).count() == 0


def test_non_owner_cannot_delete(db_session, test_quote, other_user) -> None:
    with pytest.raises(UnauthorizedError):
        quote_service.delete_quote(db_session, test_quote.id, other_user)
    db_session.expire_all()
    assert db_session.get(Quote, test_quote.id) is not None


def test_delete_missing_quote(db_session, test_user) -> None:
    with pytest.raises(NotFoundError):
        quote_service.delete_quote(db_session, 4242, test_user)


def test_delete_requires_identity(db_session, test_quote) -> None:
    with pytest.raises(UnauthorizedError):
        quote_service.delete_quote(db_session, test_quote.id, None)


def test_delete_account_retracts_votes_and_orphans_quotes(
    db_session, make_quote, make_user, test_user
) -> None:
    leaving = make_user("Leaving")
    own = make_quote("Mine", owner=leaving)
    other = make_quote("Theirs", owner=test_user)
    for quote_id, direction in ((own.id, "up"), (other.id, "down")):
        vote_ledger.apply_vote(
            db_session,
            quote_id,
            leaving,
            direction,
            verified_id=leaving.id,
            origin=ORIGIN,
            limiter=generous_limiter(),
        )
    leaving_id = leaving.id

    user_service.delete_account(db_session, leaving)

    db_session.expire_all()
    assert db_session.get(User, leaving_id) is None
    assert db_session.get(Quote, own.id).user_id is None
    assert current_likes(db_session, own.id) == 0
    assert current_likes(db_session, other.id) == 0
    assert db_session.query(QuoteVote).filter(QuoteVote.user_id == leaving_id).count() == 0


def test_link_anonymous_moves_quotes(db_session, make_quote, anonymous_user, test_user) -> None:
    make_quote("One", owner=anonymous_user)
    make_quote("Two", owner=anonymous_user)

    moved = user_service.link_anonymous_account(db_session, anonymous_user, test_user)

    assert moved == 2
    db_session.expire_all()
    owners = {quote.user_id for quote in db_session.query(Quote).all()}
    assert owners == {test_user.id}


def test_link_anonymous_requires_full_target(db_session, make_user, anonymous_user) -> None:
    other_anonymous = make_user("Also anonymous", is_anonymous=True)
    with pytest.raises(ForbiddenError):
        user_service.link_anonymous_account(db_session, anonymous_user, other_anonymous)


def test_link_anonymous_requires_anonymous_source(db_session, test_user, other_user) -> None:
    with pytest.raises(ValidationError) as excinfo:
        user_service.link_anonymous_account(db_session, other_user, test_user)
    assert excinfo.value.field == "anonymous_token"


def test_deleted_quote_id_is_not_reused(db_session, test_user) -> None:
    first = _create(db_session, test_user, text="First")
    second = _create(db_session, test_user, text="Second")
    second_id = second.id
    quote_service.delete_quote(db_session, second_id, test_user)

    third = _create(db_session, test_user, text="Third")

    assert first.id < second_id < third.id
