from app.modules.posts.services.mentions import (
    build_username_map, render_content, resolve_mentions, resolve_topics
)
from app.modules.topics.services.topic import get_topic_by_name


def test_resolve_mentions_replaces_known_usernames(db, make_user):
    alice = make_user("alice")

    content, ids = resolve_mentions(db, "hello @alice check #news")

    assert content == f"hello @{alice.id} check #news"
    assert ids == [alice.id]


def test_unknown_mentions_stay_literal(db, make_user):
    make_user("alice")

    content, ids = resolve_mentions(db, "hi @nobody")

    assert content == "hi @nobody"
    assert ids == []


def test_username_prefix_of_another_is_not_clobbered(db, make_user):
    al = make_user("al")
    alice = make_user("alice")

    content, ids = resolve_mentions(db, "@alice and @al")

    assert content == f"@{alice.id} and @{al.id}"
    assert ids == [alice.id, al.id]


def test_repeated_mention_listed_once(db, make_user):
    bob = make_user("bob")

    content, ids = resolve_mentions(db, "@bob @bob")

    assert content == f"@{bob.id} @{bob.id}"
    assert ids == [bob.id]


def test_resolve_topics_creates_each_topic_once(db):
    first = resolve_topics(db, "#news #tech #news")
    second = resolve_topics(db, "#tech")

    assert len(first) == 2
    assert second == [first[1]]
    assert get_topic_by_name(db, "news").id == first[0]


def test_render_content_links_mentions_and_topics(db, make_user):
    alice = make_user("alice")
    content, ids = resolve_mentions(db, "hello @alice check #news")

    display, segments = render_content(content, ids, {alice.id: "alice"})

    assert display == "hello @alice check #news"
    assert [segment.type for segment in segments] == ["text", "mention", "text", "topic"]
    assert segments[1].href == f"/users/{alice.id}"
    assert segments[3].href == "/topics/news"


def test_render_content_deleted_user_is_plain_text():
    missing_id = "3f2b8c1e-9a4d-4e6f-8b2a-1c3d5e7f9a0b"
    content = f"hi @{missing_id}"

    display, segments = render_content(content, [missing_id], {})

    assert display == content
    assert [segment.type for segment in segments] == ["text"]


def test_render_content_ignores_ids_not_on_the_post(make_user):
    user_id = "3f2b8c1e-9a4d-4e6f-8b2a-1c3d5e7f9a0b"

    _, segments = render_content(f"@{user_id}", [], {user_id: "alice"})

    assert segments[0].type == "text"


def test_build_username_map(db, make_user, make_post):
    author = make_user("author")
    alice = make_user("alice")
    post = make_post(author, "hey @alice")

    assert build_username_map(db, [post]) == {alice.id: "alice"}
