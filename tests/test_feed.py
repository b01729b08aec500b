from datetime import datetime
from types import SimpleNamespace

import pytest

from app.core.config import settings
from app.modules.follows.services.follow import follow
from app.modules.home_feed.services.feed import (
    dedupe_posts, get_global_feed, get_home_feed, get_mentions_feed, get_topic_feed,
    get_user_feed, newest_first,
)
from app.modules.home_feed.services.query import CONTAINS, EQ, FeedQuery, Filter, compile_feed_query
from app.modules.posts.comments.services.comment import create_comment

FEED = f"{settings.API_V1_STR}/feed"


def _ids(feed):
    return [item.id for item in feed.items]


def test_newest_first_is_stable_for_equal_timestamps():
    same = datetime(2024, 1, 1, 12, 0)
    posts = [
        SimpleNamespace(id="a", created_at=same),
        SimpleNamespace(id="b", created_at=datetime(2024, 1, 2)),
        SimpleNamespace(id="c", created_at=same),
    ]
    assert [post.id for post in newest_first(posts)] == ["b", "a", "c"]


def test_dedupe_keeps_first_occurrence():
    posts = [SimpleNamespace(id="a"), SimpleNamespace(id="b"), SimpleNamespace(id="a")]
    assert [post.id for post in dedupe_posts(posts)] == ["a", "b"]


def test_filter_rejects_unknown_operator_and_column():
    with pytest.raises(ValueError):
        Filter("like", "user_id", "x")
    with pytest.raises(ValueError):
        Filter(EQ, "password", "x")
    with pytest.raises(ValueError):
        Filter(CONTAINS, "user_id", "x")


def test_global_feed_is_newest_first(db, make_user, make_post, minutes_ago):
    author = make_user("author")
    old = make_post(author, "old", created_at=minutes_ago(30))
    new = make_post(author, "new", created_at=minutes_ago(1))
    middle = make_post(author, "middle", created_at=minutes_ago(10))

    feed = get_global_feed(db, viewer_id=None)

    assert _ids(feed) == [new.id, middle.id, old.id]
    assert feed.total == 3
    assert feed.has_more is False


def test_scheduled_posts_hidden_from_everyone_but_author(db, make_user, make_post, in_future, minutes_ago):
    author = make_user("author")
    other = make_user("other")
    published = make_post(author, "now")
    pending = make_post(author, "later", scheduled_at=in_future(hours=3))
    due = make_post(author, "due", scheduled_at=minutes_ago(1))

    assert pending.id not in _ids(get_global_feed(db, viewer_id=other.id))
    assert pending.id not in _ids(get_global_feed(db, viewer_id=None))
    assert pending.id not in _ids(get_user_feed(db, author.id, viewer_id=other.id))
    assert pending.id in _ids(get_global_feed(db, viewer_id=author.id))
    assert {published.id, due.id} <= set(_ids(get_global_feed(db, viewer_id=other.id)))


def test_visibility_applies_to_every_compiled_query(db, make_user, make_post, in_future):
    author = make_user("author")
    make_post(author, "later", scheduled_at=in_future())

    spec = FeedQuery().where(EQ, "user_id", author.id)

    assert compile_feed_query(db, spec).all() == []


def test_home_feed_has_own_and_followed_posts_only(db, make_user, make_post):
    me = make_user("me")
    friend = make_user("friend")
    stranger = make_user("stranger")
    follow(db, me.id, friend.id)
    mine = make_post(me, "mine")
    theirs = make_post(friend, "theirs")
    make_post(stranger, "unrelated")

    assert set(_ids(get_home_feed(db, me.id))) == {mine.id, theirs.id}


def test_home_feed_of_new_user_has_own_posts(db, make_user, make_post):
    me = make_user("me")
    mine = make_post(me, "first post")

    assert _ids(get_home_feed(db, me.id)) == [mine.id]


def test_topic_feed(db, make_user, make_post):
    author = make_user("author")
    tagged = make_post(author, "about #python")
    make_post(author, "about #rust")
    make_post(author, "about #Python")

    feed = get_topic_feed(db, "python", viewer_id=None)

    assert _ids(feed) == [tagged.id]
    assert feed.topic == "python"


def test_unknown_topic_gives_empty_feed(db):
    feed = get_topic_feed(db, "nothing", viewer_id=None)
    assert feed.items == []
    assert feed.total == 0


def test_mentions_feed(db, make_user, make_post):
    author = make_user("author")
    alice = make_user("alice")
    mention = make_post(author, "hi @alice")
    make_post(author, "no mention of alice")

    assert _ids(get_mentions_feed(db, alice.id)) == [mention.id]


def test_feed_paging(db, make_user, make_post, minutes_ago):
    author = make_user("author")
    posts = [make_post(author, f"post {i}", created_at=minutes_ago(10 - i)) for i in range(5)]

    first = get_global_feed(db, viewer_id=None, skip=0, limit=2)
    last = get_global_feed(db, viewer_id=None, skip=4, limit=2)

    assert _ids(first) == [posts[4].id, posts[3].id]
    assert first.has_more is True
    assert _ids(last) == [posts[0].id]
    assert last.has_more is False


def test_feed_items_carry_comment_counts_and_authors(db, make_user, make_post):
    author = make_user("author")
    post = make_post(author, "talk to me")
    create_comment(db, post.id, author.id, "one")
    create_comment(db, post.id, author.id, "two")

    item = get_global_feed(db, viewer_id=None).items[0]

    assert item.comment_count == 2
    assert item.username == "author"


def test_feed_endpoints(client, make_user, make_post, auth_headers):
    me = make_user("me")
    make_post(me, "hello #news")

    assert client.get(FEED).status_code == 401
    assert client.get(FEED, headers=auth_headers(me)).json()["feed"] == "following"
    assert client.get(f"{FEED}/global").json()["total"] == 1
    assert client.get(f"{FEED}/topics/news").json()["total"] == 1
    assert client.get(f"{FEED}/users/{me.id}").json()["feed"] == "user"
    assert client.get(f"{FEED}/users/missing").status_code == 404
    assert client.get(f"{FEED}/mentions", headers=auth_headers(me)).json()["items"] == []
