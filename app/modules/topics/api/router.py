from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user_optional
from app.modules.home_feed.schemas.feed import FeedResponse
from app.modules.home_feed.services.feed import get_topic_feed
from app.modules.topics.schemas.topic import HotTopic, Topic
from app.modules.topics.services.topic import get_hot_topics, get_trending_topics, search_topics
from app.modules.user_management.models.user import Profile

router = APIRouter()

@router.get("/search", response_model=List[Topic])
def search(
    *,
    db: Session = Depends(get_db),
    q: str = Query("", max_length=100),
) -> Any:
    """Topic names starting with q, for #topic autocomplete"""
    q = q.lstrip("#")
    if not q:
        return []
    return search_topics(db, q)

@router.get("/trending", response_model=List[str])
def trending(
    *,
    db: Session = Depends(get_db),
    limit: int = Query(10, ge=1, le=50),
) -> Any:
    return get_trending_topics(db, limit=limit)

@router.get("/hot", response_model=List[HotTopic])
def hot(db: Session = Depends(get_db)) -> Any:
    """Most used topics over the last 24 hours"""
    return get_hot_topics(db)

@router.get("/{name}/posts", response_model=FeedResponse)
def topic_posts(
    *,
    db: Session = Depends(get_db),
    name: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    return get_topic_feed(db, name, current_user.id if current_user else None, skip, limit)
