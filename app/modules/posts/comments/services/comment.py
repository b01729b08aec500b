from typing import Dict, List, Optional
import logging
import uuid
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.comments.schemas.comment import (
    Comment as CommentSchema, CommentedPost, CommentWithPost
)
from app.modules.home_feed.services.query import visibility_clause
from app.modules.posts.models.post import Post
from app.modules.posts.services.mentions import build_username_map, render_content
from app.modules.user_management.services.user import DELETED_USER, get_profile_map

logger = logging.getLogger(__name__)

def get_comment(db: Session, comment_id: str) -> Optional[Comment]:
    """Get comment by ID"""
    return db.query(Comment).filter(Comment.id == comment_id).first()

def _with_authors(db: Session, comments: List[Comment]) -> List[CommentSchema]:
    """Attach author username/avatar using one batch profile lookup"""
    profiles = get_profile_map(db, (comment.user_id for comment in comments))
    result = []
    for comment in comments:
        profile = profiles.get(comment.user_id)
        result.append(CommentSchema(
            id=comment.id,
            post_id=comment.post_id,
            user_id=comment.user_id,
            content=comment.content,
            created_at=comment.created_at,
            username=profile.username if profile else DELETED_USER,
            avatar_url=profile.avatar_url if profile else None,
        ))
    return result

def get_comments(db: Session, post_id: str, skip: int = 0, limit: int = 100) -> List[CommentSchema]:
    """Comments on a post, newest first, with author display fields"""
    comments = (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return _with_authors(db, comments)

def create_comment(db: Session, post_id: str, user_id: str, content: str) -> CommentSchema:
    """Create a comment; raises ValueError for blank content before writing"""
    if content is None or not content.strip():
        raise ValueError("Comment cannot be empty")

    comment = Comment(
        id=str(uuid.uuid4()),
        post_id=post_id,
        user_id=user_id,
        content=content,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info(f"Created comment {comment.id} on post {post_id}")
    return _with_authors(db, [comment])[0]

def delete_comment(db: Session, comment: Comment) -> Comment:
    """Delete comment"""
    db.delete(comment)
    db.commit()
    return comment

def get_comment_count(db: Session, post_id: str) -> int:
    """Number of comments on a post"""
    return db.query(func.count(Comment.id)).filter(Comment.post_id == post_id).scalar() or 0

def get_comment_counts(db: Session, post_ids: List[str]) -> Dict[str, int]:
    """post id -> comment count for a batch of posts, in one grouped query"""
    if not post_ids:
        return {}
    rows = (
        db.query(Comment.post_id, func.count(Comment.id))
        .filter(Comment.post_id.in_(post_ids))
        .group_by(Comment.post_id)
        .all()
    )
    return {post_id: count for post_id, count in rows}

def get_comments_by_user(db: Session, user_id: str, viewer_id: Optional[str] = None) -> List[CommentWithPost]:
    """A user's comments, newest first, each with a summary of its post.

    Posts the viewer may not see yet (scheduled) are left out of the summary.
    """
    comments = (
        db.query(Comment)
        .filter(Comment.user_id == user_id)
        .order_by(Comment.created_at.desc())
        .all()
    )
    if not comments:
        return []

    post_ids = list({comment.post_id for comment in comments})
    posts = {
        post.id: post
        for post in db.query(Post).filter(Post.id.in_(post_ids), visibility_clause(viewer_id)).all()
    }
    authors = get_profile_map(db, (post.user_id for post in posts.values()))
    username_map = build_username_map(db, posts.values())

    result = []
    for comment in _with_authors(db, comments):
        post = posts.get(comment.post_id)
        summary = None
        if post is not None:
            author = authors.get(post.user_id)
            summary = CommentedPost(
                id=post.id,
                content=render_content(post.content, post.mentions, username_map)[0],
                user_id=post.user_id,
                username=author.username if author else DELETED_USER,
                avatar_url=author.avatar_url if author else None,
            )
        result.append(CommentWithPost(**comment.model_dump(), post=summary))
    return result
