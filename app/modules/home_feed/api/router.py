from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user, get_current_user_optional
from app.modules.user_management.models.user import Profile
from app.modules.user_management.services.user import get_user
from app.modules.home_feed.schemas.feed import FeedResponse
from app.modules.home_feed.services.feed import (
    get_global_feed, get_home_feed, get_mentions_feed, get_topic_feed, get_user_feed
)

router = APIRouter()

def _viewer_id(user: Optional[Profile]) -> Optional[str]:
    return user.id if user else None

@router.get("/", response_model=FeedResponse)
@router.get("", response_model=FeedResponse)
def read_home_feed(
    *,
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """Posts by the current user and everyone they follow"""
    return get_home_feed(db, current_user.id, skip, limit)

@router.get("/global", response_model=FeedResponse)
def read_global_feed(
    *,
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    return get_global_feed(db, _viewer_id(current_user), skip, limit)

@router.get("/mentions", response_model=FeedResponse)
def read_mentions_feed(
    *,
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """Posts that mention the current user"""
    return get_mentions_feed(db, current_user.id, skip, limit)

@router.get("/users/{user_id}", response_model=FeedResponse)
def read_user_feed(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    if not get_user(db, user_id=user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return get_user_feed(db, user_id, _viewer_id(current_user), skip, limit)

@router.get("/topics/{name}", response_model=FeedResponse)
def read_topic_feed(
    *,
    db: Session = Depends(get_db),
    name: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    """Posts tagged #name; an unknown topic gives an empty feed"""
    return get_topic_feed(db, name, _viewer_id(current_user), skip, limit)
