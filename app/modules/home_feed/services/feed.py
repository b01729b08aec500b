from typing import List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from app.modules.follows.services.follow import get_following_ids
from app.modules.home_feed.schemas.feed import FeedResponse
from app.modules.home_feed.services.query import CONTAINS, EQ, IN, FeedQuery, compile_feed_query
from app.modules.posts.models.post import Post
from app.modules.posts.services.post import serialize_posts
from app.modules.topics.services.topic import get_topic_by_name

logger = logging.getLogger(__name__)

GLOBAL = "global"
FOLLOWING = "following"
USER = "user"
TOPIC = "topic"
MENTIONS = "mentions"


def newest_first(posts: List[Post]) -> List[Post]:
    """Order by created_at descending; equal timestamps keep their input order"""
    return sorted(posts, key=lambda post: post.created_at, reverse=True)


def dedupe_posts(posts: List[Post]) -> List[Post]:
    """Drop repeated post ids, keeping the first occurrence"""
    seen = set()
    result = []
    for post in posts:
        if post.id not in seen:
            seen.add(post.id)
            result.append(post)
    return result


def run_feed_query(db: Session, spec: FeedQuery) -> Tuple[List[Post], int]:
    """Execute a spec: one page of visible matches, newest first, plus the total"""
    query = compile_feed_query(db, spec)
    total = query.count()
    if spec.skip:
        query = query.offset(spec.skip)
    if spec.limit is not None:
        query = query.limit(spec.limit)
    return newest_first(dedupe_posts(query.all())), total


def global_spec(viewer_id: Optional[str]) -> FeedQuery:
    """All posts the viewer may see"""
    return FeedQuery(viewer_id=viewer_id)


def following_spec(db: Session, viewer_id: str) -> FeedQuery:
    """Posts by the viewer and everyone the viewer follows"""
    author_ids = {viewer_id, *get_following_ids(db, viewer_id)}
    return FeedQuery(viewer_id=viewer_id).where(IN, "user_id", author_ids)


def user_spec(user_id: str, viewer_id: Optional[str]) -> FeedQuery:
    """Posts authored by one user"""
    return FeedQuery(viewer_id=viewer_id).where(EQ, "user_id", user_id)


def topic_spec(topic_id: str, viewer_id: Optional[str]) -> FeedQuery:
    """Posts tagged with a topic"""
    return FeedQuery(viewer_id=viewer_id).where(CONTAINS, "topics", topic_id)


def mentions_spec(user_id: str) -> FeedQuery:
    """Posts mentioning user_id, as seen by that user"""
    return FeedQuery(viewer_id=user_id).where(CONTAINS, "mentions", user_id)


def _feed(db: Session, feed: str, spec: Optional[FeedQuery], skip: int, limit: int, topic: Optional[str] = None) -> FeedResponse:
    if spec is None:
        return FeedResponse(feed=feed, items=[], total=0, has_more=False, topic=topic)
    spec.skip, spec.limit = skip, limit
    posts, total = run_feed_query(db, spec)
    return FeedResponse(
        feed=feed,
        items=serialize_posts(db, posts),
        total=total,
        has_more=total > skip + limit,
        topic=topic,
    )


def get_global_feed(db: Session, viewer_id: Optional[str], skip: int = 0, limit: int = 20) -> FeedResponse:
    return _feed(db, GLOBAL, global_spec(viewer_id), skip, limit)


def get_home_feed(db: Session, user_id: str, skip: int = 0, limit: int = 20) -> FeedResponse:
    return _feed(db, FOLLOWING, following_spec(db, user_id), skip, limit)


def get_user_feed(db: Session, user_id: str, viewer_id: Optional[str], skip: int = 0, limit: int = 20) -> FeedResponse:
    return _feed(db, USER, user_spec(user_id, viewer_id), skip, limit)


def get_topic_feed(db: Session, topic_name: str, viewer_id: Optional[str], skip: int = 0, limit: int = 20) -> FeedResponse:
    topic = get_topic_by_name(db, topic_name)
    if topic is None:
        logger.info(f"Topic '{topic_name}' not found")
    spec = topic_spec(topic.id, viewer_id) if topic else None
    return _feed(db, TOPIC, spec, skip, limit, topic=topic_name)


def get_mentions_feed(db: Session, user_id: str, skip: int = 0, limit: int = 20) -> FeedResponse:
    return _feed(db, MENTIONS, mentions_spec(user_id), skip, limit)
