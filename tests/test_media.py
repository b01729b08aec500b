import pytest

from app.core.config import settings
from app.core.storage import key_from_url
from app.modules.media.service import validate_image, validate_image_count

MEDIA = f"{settings.API_V1_STR}/media"


def test_validate_image_accepts_images():
    validate_image("a.png", "image/png", 1024)


@pytest.mark.parametrize("filename,content_type,size", [
    ("a.txt", "text/plain", 10),
    ("a.png", None, 10),
    ("big.png", "image/png", settings.MAX_UPLOAD_SIZE + 1),
])
def test_validate_image_rejects(filename, content_type, size):
    with pytest.raises(ValueError):
        validate_image(filename, content_type, size)


def test_validate_image_count():
    validate_image_count(settings.MAX_IMAGES_PER_POST)
    with pytest.raises(ValueError):
        validate_image_count(settings.MAX_IMAGES_PER_POST + 1)


def test_key_from_url():
    assert key_from_url("https://cdn.example.com/user-1/abc.png") == "user-1/abc.png"
    assert key_from_url("https://cdn.example.com/abc.png") is None


def test_upload_and_serve_locally(client, make_user, auth_headers):
    user = make_user("uploader")

    response = client.post(
        f"{MEDIA}/images",
        files=[("images", ("pic.png", b"\x89PNGdata", "image/png"))],
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    url = response.json()["image_urls"][0]
    key = key_from_url(url)
    assert key.startswith(f"{user.id}/")

    served = client.get(f"{MEDIA}/{key}")
    assert served.status_code == 200
    assert served.content == b"\x89PNGdata"


def test_serve_missing_or_escaping_path(client):
    assert client.get(f"{MEDIA}/nobody/missing.png").status_code == 404
    assert client.get(f"{MEDIA}/..%2F..%2Fetc/passwd").status_code == 404
