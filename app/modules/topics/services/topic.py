from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional
import logging
import uuid

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.modules.posts.models.post import Post
from app.modules.topics.models.topic import Topic
from app.modules.topics.schemas.topic import HotTopic

logger = logging.getLogger(__name__)

TRENDING_WINDOW = 100
HOT_TOPICS_LIMIT = 10
SEARCH_LIMIT = 5

def get_topic_by_name(db: Session, name: str) -> Optional[Topic]:
    """Get topic by exact (case-sensitive) name"""
    return db.query(Topic).filter(Topic.name == name).first()

def get_topics_by_names(db: Session, names: List[str]) -> List[Topic]:
    if not names:
        return []
    return db.query(Topic).filter(Topic.name.in_(names)).all()

def get_topics_by_ids(db: Session, topic_ids: List[str]) -> List[Topic]:
    if not topic_ids:
        return []
    return db.query(Topic).filter(Topic.id.in_(topic_ids)).all()

def upsert_topics(db: Session, names: List[str]) -> List[Topic]:
    """Return topic rows for names, creating missing ones; idempotent by name.

    Result order follows ``names``.
    """
    if not names:
        return []

    by_name = {topic.name: topic for topic in get_topics_by_names(db, names)}
    for name in names:
        if name in by_name:
            continue
        topic = Topic(id=str(uuid.uuid4()), name=name)
        db.add(topic)
        try:
            db.commit()
            by_name[name] = topic
            logger.info(f"Created topic '{name}'")
        except IntegrityError:
            # A concurrent submission created it first
            db.rollback()
            existing = get_topic_by_name(db, name)
            if existing is None:
                raise
            by_name[name] = existing
    return [by_name[name] for name in names]

def _visible_topic_lists(db: Session, since: Optional[datetime] = None, limit: Optional[int] = None) -> List[List[str]]:
    now = datetime.utcnow()
    query = (
        db.query(Post.topics)
        .filter(or_(Post.scheduled_at.is_(None), Post.scheduled_at <= now))
        .order_by(Post.created_at.desc())
    )
    if since is not None:
        query = query.filter(Post.created_at >= since)
    if limit is not None:
        query = query.limit(limit)
    return [row.topics or [] for row in query.all()]

def _count_topics(topic_lists: List[List[str]]) -> Counter:
    counts = Counter()
    for topic_ids in topic_lists:
        counts.update(topic_ids)
    return counts

def get_trending_topics(db: Session, limit: int = 10) -> List[str]:
    """Topic names ranked by frequency over the latest posts"""
    counts = _count_topics(_visible_topic_lists(db, limit=TRENDING_WINDOW))
    top_ids = [topic_id for topic_id, _ in counts.most_common(limit)]
    names = {topic.id: topic.name for topic in get_topics_by_ids(db, top_ids)}
    return [names[topic_id] for topic_id in top_ids if topic_id in names]

def get_hot_topics(db: Session) -> List[HotTopic]:
    """Most used topics in the last 24 hours, with counts"""
    since = datetime.utcnow() - timedelta(days=1)
    counts = _count_topics(_visible_topic_lists(db, since=since))
    topics = get_topics_by_ids(db, list(counts))
    hot = sorted(
        (HotTopic(id=topic.id, name=topic.name, count=counts[topic.id]) for topic in topics),
        key=lambda topic: topic.count,
        reverse=True,
    )
    return hot[:HOT_TOPICS_LIMIT]

def search_topics(db: Session, query: str) -> List[Topic]:
    """Topics whose name starts with query (case-insensitive), for autocomplete"""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return (
        db.query(Topic)
        .filter(Topic.name.ilike(f"{escaped}%", escape="\\"))
        .order_by(Topic.name)
        .limit(SEARCH_LIMIT)
        .all()
    )
