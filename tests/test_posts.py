import pytest

from app.core.config import settings
from app.modules.posts.comments.services.comment import create_comment, get_comment_count
from app.modules.posts.services.post import delete_post, get_post

POSTS = f"{settings.API_V1_STR}/posts"


class RecordingStorage:
    def __init__(self, fail=False):
        self.deleted = []
        self.fail = fail

    def delete_file(self, url):
        self.deleted.append(url)
        if self.fail:
            raise RuntimeError("storage unavailable")
        return True


def _png(name="photo.png"):
    return ("images", (name, b"\x89PNG\r\n\x1a\nfake", "image/png"))


def test_create_post_resolves_mentions_and_topics(client, make_user, auth_headers):
    author = make_user("author")
    alice = make_user("alice")

    response = client.post(
        POSTS,
        data={"content": "hello @alice check #news"},
        headers=auth_headers(author),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["content"] == "hello @alice check #news"
    assert body["mentions"] == [alice.id]
    assert len(body["topics"]) == 1
    assert body["username"] == "author"
    assert body["comment_count"] == 0
    assert any(segment["type"] == "mention" for segment in body["segments"])


def test_stored_content_uses_profile_ids(client, db, make_user, auth_headers):
    author = make_user("author")
    alice = make_user("alice")

    response = client.post(POSTS, data={"content": "hi @alice"}, headers=auth_headers(author))

    post = get_post(db, response.json()["id"])
    assert post.content == f"hi @{alice.id}"


def test_create_post_requires_auth(client):
    response = client.post(POSTS, data={"content": "hello"})
    assert response.status_code == 401


@pytest.mark.parametrize("content", ["", "   ", "x" * 281])
def test_create_post_rejects_bad_content(client, make_user, auth_headers, content):
    author = make_user("author")

    response = client.post(POSTS, data={"content": content}, headers=auth_headers(author))

    assert response.status_code in (400, 422)


def test_create_post_accepts_max_length(client, make_user, auth_headers):
    author = make_user("author")

    response = client.post(POSTS, data={"content": "x" * 280}, headers=auth_headers(author))

    assert response.status_code == 201


def test_create_post_with_images(client, make_user, auth_headers):
    author = make_user("author")

    response = client.post(
        POSTS,
        data={"content": "pics"},
        files=[_png("a.png"), _png("b.png")],
        headers=auth_headers(author),
    )

    assert response.status_code == 201
    urls = response.json()["image_urls"]
    assert len(urls) == 2
    assert all(f"/media/{author.id}/" in url for url in urls)


def test_create_post_rejects_five_images(client, make_user, auth_headers):
    author = make_user("author")

    response = client.post(
        POSTS,
        data={"content": "too many"},
        files=[_png(f"{i}.png") for i in range(5)],
        headers=auth_headers(author),
    )

    assert response.status_code == 400


def test_create_post_rejects_non_image(client, make_user, auth_headers):
    author = make_user("author")

    response = client.post(
        POSTS,
        data={"content": "doc"},
        files=[("images", ("notes.txt", b"plain", "text/plain"))],
        headers=auth_headers(author),
    )

    assert response.status_code == 400


def test_create_post_rejects_past_schedule(client, make_user, auth_headers, minutes_ago):
    author = make_user("author")

    response = client.post(
        POSTS,
        data={"content": "late", "scheduled_at": minutes_ago(5).isoformat()},
        headers=auth_headers(author),
    )

    assert response.status_code == 400


def test_scheduled_post_only_visible_to_author(client, make_user, auth_headers, in_future):
    author = make_user("author")
    other = make_user("other")

    response = client.post(
        POSTS,
        data={"content": "soon", "scheduled_at": in_future(hours=2).isoformat()},
        headers=auth_headers(author),
    )
    assert response.status_code == 201
    assert response.json()["is_scheduled"] is True
    post_id = response.json()["id"]

    assert client.get(f"{POSTS}/{post_id}", headers=auth_headers(author)).status_code == 200
    assert client.get(f"{POSTS}/{post_id}", headers=auth_headers(other)).status_code == 404
    assert client.get(f"{POSTS}/{post_id}").status_code == 404
    assert client.get(POSTS).json()["total"] == 0


def test_only_author_can_delete(client, make_user, make_post, auth_headers):
    author = make_user("author")
    other = make_user("other")
    post = make_post(author, "mine")

    assert client.delete(f"{POSTS}/{post.id}", headers=auth_headers(other)).status_code == 403
    assert client.delete(f"{POSTS}/{post.id}", headers=auth_headers(author)).status_code == 204
    assert client.get(f"{POSTS}/{post.id}").status_code == 404


def test_delete_missing_post(client, make_user, auth_headers):
    author = make_user("author")
    response = client.delete(f"{POSTS}/does-not-exist", headers=auth_headers(author))
    assert response.status_code == 404


def test_delete_post_removes_each_image_and_comments(db, make_user, make_post):
    author = make_user("author")
    urls = ["http://localhost:8000/api/v1/media/u/a.png", "http://localhost:8000/api/v1/media/u/b.png"]
    post = make_post(author, "bye", image_urls=urls)
    create_comment(db, post.id, author.id, "first")
    post_id = post.id
    storage = RecordingStorage()

    delete_post(db, post, storage=storage)

    assert storage.deleted == urls
    assert get_post(db, post_id) is None
    assert get_comment_count(db, post_id) == 0


def test_delete_post_survives_storage_errors(db, make_user, make_post):
    author = make_user("author")
    post = make_post(author, "bye", image_urls=["http://localhost:8000/api/v1/media/u/a.png"])
    post_id = post.id

    delete_post(db, post, storage=RecordingStorage(fail=True))

    assert get_post(db, post_id) is None
