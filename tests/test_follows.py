import pytest

from app.core.config import settings
from app.modules.follows.services.follow import (
    count_followers, count_following, follow, get_follower_ids, get_followers, get_following_ids,
    is_following, unfollow,
)

FOLLOWS = f"{settings.API_V1_STR}/follows"


def test_follow_is_idempotent(db, make_user):
    a = make_user("a")
    b = make_user("b")

    assert follow(db, a.id, b.id) is True
    assert follow(db, a.id, b.id) is False
    assert count_followers(db, b.id) == 1
    assert get_following_ids(db, a.id) == [b.id]


def test_follow_is_one_directional(db, make_user):
    a = make_user("a")
    b = make_user("b")
    follow(db, a.id, b.id)

    assert is_following(db, a.id, b.id)
    assert not is_following(db, b.id, a.id)
    assert count_following(db, b.id) == 0


def test_self_follow_is_rejected(db, make_user):
    a = make_user("a")
    with pytest.raises(ValueError):
        follow(db, a.id, a.id)


def test_unfollow(db, make_user):
    a = make_user("a")
    b = make_user("b")
    follow(db, a.id, b.id)

    assert unfollow(db, a.id, b.id) is True
    assert unfollow(db, a.id, b.id) is False
    assert not is_following(db, a.id, b.id)


def test_followers_listing(db, make_user):
    a = make_user("a")
    b = make_user("b")
    c = make_user("c")
    follow(db, b.id, a.id)
    follow(db, c.id, a.id)

    assert [user.username for user in get_followers(db, a.id)] == ["b", "c"]
    assert set(get_follower_ids(db, a.id)) == {b.id, c.id}


def test_follow_endpoints(client, make_user, auth_headers):
    a = make_user("a")
    b = make_user("b")

    response = client.post(f"{FOLLOWS}/{b.id}", headers=auth_headers(a))
    assert response.status_code == 200
    assert response.json() == {"user_id": b.id, "is_following": True, "followers_count": 1}

    again = client.post(f"{FOLLOWS}/{b.id}", headers=auth_headers(a))
    assert again.json()["followers_count"] == 1

    followers = client.get(f"{FOLLOWS}/{b.id}/followers").json()
    assert [user["username"] for user in followers] == ["a"]

    response = client.delete(f"{FOLLOWS}/{b.id}", headers=auth_headers(a))
    assert response.json()["is_following"] is False

    status = client.get(f"{FOLLOWS}/{b.id}/status", headers=auth_headers(a))
    assert status.json()["followers_count"] == 0


def test_follow_self_endpoint_is_bad_request(client, make_user, auth_headers):
    a = make_user("a")
    assert client.post(f"{FOLLOWS}/{a.id}", headers=auth_headers(a)).status_code == 400


def test_follow_unknown_user(client, make_user, auth_headers):
    a = make_user("a")
    assert client.post(f"{FOLLOWS}/missing", headers=auth_headers(a)).status_code == 404
