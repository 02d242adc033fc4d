# tests/v1/test_users.py
"""Tests for account endpoints."""

from fastapi import status

from quote_stage.models import Quote, User

from tests.conftest import current_likes


def test_delete_account(client, auth_token, test_user, make_quote, db_session) -> None:
    """Deleting an account retracts its votes and leaves its quotes unowned."""
    own = make_quote("Mine", owner=test_user)
    other = make_quote("Someone else's")
    client.post("/api/v1/votes/", json={"quote_id": other.id, "direction": "up"}, headers=auth_token)
    user_id = test_user.id

    response = client.delete("/api/v1/users/me", headers=auth_token)

    assert response.status_code == status.HTTP_204_NO_CONTENT
    db_session.expire_all()
    assert db_session.get(User, user_id) is None
    assert db_session.get(Quote, own.id).user_id is None
    assert current_likes(db_session, other.id) == 0

    # The token no longer resolves to a user.
    response = client.get(f"/api/v1/votes/{other.id}/my-vote", headers=auth_token)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_delete_account_unauthenticated(client) -> None:
    response = client.delete("/api/v1/users/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_link_anonymous_account(
    client, auth_token, anonymous_auth_token, anonymous_user, test_user, make_quote, db_session
) -> None:
    quote_id = make_quote("Drafted while anonymous", owner=anonymous_user).id
    token = anonymous_auth_token["Authorization"].removeprefix("Bearer ")

    response = client.post(
        "/api/v1/users/me/link-anonymous",
        json={"anonymous_token": token},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"reassigned": 1}
    db_session.expire_all()
    assert db_session.get(Quote, quote_id).user_id == test_user.id


def test_link_anonymous_rejects_full_account_token(client, auth_token, other_auth_token) -> None:
    token = other_auth_token["Authorization"].removeprefix("Bearer ")
    response = client.post(
        "/api/v1/users/me/link-anonymous",
        json={"anonymous_token": token},
        headers=auth_token,
    )
    assert response.status_code == 422
    assert response.json()["field"] == "anonymous_token"


def test_link_anonymous_rejects_invalid_token(client, auth_token) -> None:
    response = client.post(
        "/api/v1/users/me/link-anonymous",
        json={"anonymous_token": "garbage"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
