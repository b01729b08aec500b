from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging
import uuid

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.storage import r2_storage
from app.modules.home_feed.services.query import visibility_clause
from app.modules.media.service import validate_image_count
from app.modules.posts.models.post import Post
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.services.comment import get_comment_counts
from app.modules.posts.schemas.post import PostWithCounts
from app.modules.posts.services.mentions import (
    build_username_map, render_content, resolve_mentions, resolve_topics
)
from app.modules.user_management.services.user import DELETED_USER, get_profile_map

logger = logging.getLogger(__name__)

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

def validate_post_content(content: Optional[str]) -> str:
    """Raise ValueError for empty or over-long post bodies"""
    if content is None or not content.strip():
        raise ValueError("Post content cannot be empty")
    if len(content) > settings.MAX_POST_LENGTH:
        raise ValueError(f"Post cannot exceed {settings.MAX_POST_LENGTH} characters")
    return content

def validate_scheduled_at(scheduled_at: Optional[datetime], now: Optional[datetime] = None) -> Optional[datetime]:
    scheduled_at = to_naive_utc(scheduled_at)
    if scheduled_at is not None and scheduled_at <= (now or datetime.utcnow()):
        raise ValueError("Scheduled time must be in the future")
    return scheduled_at

def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID, regardless of schedule"""
    return db.query(Post).filter(Post.id == post_id).first()

def get_visible_post(db: Session, post_id: str, viewer_id: Optional[str]) -> Optional[Post]:
    """Get post by ID if the viewer may see it"""
    return (
        db.query(Post)
        .filter(Post.id == post_id, visibility_clause(viewer_id))
        .first()
    )

def create_post(
    db: Session,
    author_id: str,
    content: str,
    image_urls: Optional[List[str]] = None,
    scheduled_at: Optional[datetime] = None,
) -> Post:
    """Create a post, resolving topics and mentions first.

    Topic upserts are committed before the post insert; a failed insert
    leaves the new topics in place.
    """
    validate_post_content(content)
    scheduled_at = validate_scheduled_at(scheduled_at)
    image_urls = list(image_urls or [])
    validate_image_count(len(image_urls))

    topic_ids = resolve_topics(db, content)
    stored_content, mention_ids = resolve_mentions(db, content)

    post = Post(
        id=str(uuid.uuid4()),
        content=stored_content,
        user_id=author_id,
        image_urls=image_urls,
        mentions=mention_ids or None,
        topics=topic_ids or None,
        scheduled_at=scheduled_at,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info(f"Created post {post.id} for author {author_id} "
                f"(mentions={len(mention_ids)}, topics={len(topic_ids)}, scheduled={scheduled_at is not None})")
    return post

def delete_post(db: Session, post: Post, storage=r2_storage) -> Post:
    """Delete a post, its comments and its images.

    Image deletion failures are logged and never block removing the post.
    """
    logger.info(f"Deleting post with ID: {post.id}")
    for url in post.image_urls or []:
        try:
            if not storage.delete_file(url):
                logger.error(f"Could not delete image {url} of post {post.id}")
        except Exception as e:
            logger.error(f"Error deleting image {url} of post {post.id}: {e}")

    db.query(Comment).filter(Comment.post_id == post.id).delete(synchronize_session=False)
    db.delete(post)
    db.commit()
    return post

def serialize_posts(db: Session, posts: List[Post], comment_counts: Optional[Dict[str, int]] = None) -> List[PostWithCounts]:
    """Attach author, rendered content and comment counts to a batch of posts"""
    if not posts:
        return []
    authors = get_profile_map(db, (post.user_id for post in posts))
    username_map = build_username_map(db, posts)
    if comment_counts is None:
        comment_counts = get_comment_counts(db, [post.id for post in posts])

    result = []
    for post in posts:
        author = authors.get(post.user_id)
        display, segments = render_content(post.content, post.mentions, username_map)
        result.append(PostWithCounts(
            id=post.id,
            content=display,
            user_id=post.user_id,
            username=author.username if author else DELETED_USER,
            avatar_url=author.avatar_url if author else None,
            image_urls=post.image_urls or [],
            mentions=post.mentions or [],
            topics=post.topics or [],
            created_at=post.created_at,
            scheduled_at=post.scheduled_at,
            is_scheduled=post.scheduled_at is not None and post.scheduled_at > datetime.utcnow(),
            segments=segments,
            comment_count=comment_counts.get(post.id, 0),
        ))
    return result
