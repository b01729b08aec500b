import os
import shutil
import tempfile
from datetime import datetime, timedelta

import pytest

# Point settings at a throwaway SQLite database and upload directory before
# anything under app/ is imported.
_UPLOAD_DIR = tempfile.mkdtemp(prefix="chirpline-uploads-")
os.environ["DATABASE_URL"] = "sqlite:///./tests/test.db"
os.environ["UPLOAD_DIRECTORY"] = _UPLOAD_DIR
os.environ["ENVIRONMENT"] = "test"
for _var in ("R2_ENDPOINT", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY", "R2_PUBLIC_URL"):
    os.environ[_var] = ""

from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import app
from app.modules.auth.services.auth import create_profile
from app.modules.posts.services.post import create_post



@pytest.fixture(scope="session", autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    shutil.rmtree(_UPLOAD_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def _clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(username, email=None, password="secret123"):
        return create_profile(
            db,
            email=email or f"{username.replace('.', '_')}@example.com",
            username=username,
            password=password,
        )
    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _auth_headers


@pytest.fixture
def make_post(db):
    """Create a post through the service, then pin timestamps for ordering tests"""
    def _make_post(author, content, created_at=None, scheduled_at=None, image_urls=None):
        post = create_post(db, author.id, content, image_urls=image_urls)
        if created_at is not None:
            post.created_at = created_at
        if scheduled_at is not None:
            post.scheduled_at = scheduled_at
        db.commit()
        db.refresh(post)
        return post
    return _make_post


@pytest.fixture
def in_future():
    def _in_future(**kwargs):
        return datetime.utcnow() + timedelta(**(kwargs or {"hours": 1}))
    return _in_future


@pytest.fixture
def minutes_ago():
    def _minutes_ago(minutes):
        return datetime.utcnow() - timedelta(minutes=minutes)
    return _minutes_ago
