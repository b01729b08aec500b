from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
import logging

from app.db.session import get_db
from app.deps import get_current_user, get_current_user_optional
from app.modules.user_management.models.user import Profile
from app.modules.posts.services.post import get_visible_post
from app.modules.posts.comments.schemas.comment import (
    Comment as CommentSchema, CommentCount, CommentCreate
)
from app.modules.posts.comments.services.comment import (
    get_comment, get_comments, get_comment_count, create_comment, delete_comment
)

router = APIRouter()
logger = logging.getLogger("app")

def _validate_post(db: Session, post_id: str, viewer_id: Optional[str]) -> None:
    """Raise 404 unless the post exists and the viewer may see it"""
    if not get_visible_post(db, post_id, viewer_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found"
        )

@router.get("/", response_model=List[CommentSchema])
@router.get("", response_model=List[CommentSchema])
def read_comments(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    """Comments on a post, newest first"""
    _validate_post(db, post_id, current_user.id if current_user else None)
    return get_comments(db, post_id, skip=skip, limit=limit)

@router.post("/", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=CommentSchema, status_code=status.HTTP_201_CREATED)
def create_new_comment(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    comment_in: CommentCreate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """Comment on a post"""
    _validate_post(db, post_id, current_user.id)
    try:
        return create_comment(db, post_id, current_user.id, comment_in.content)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating comment on post {post_id}: {str(e)}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create comment"
        )

@router.get("/count", response_model=CommentCount)
def read_comment_count(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    _validate_post(db, post_id, current_user.id if current_user else None)
    return CommentCount(post_id=post_id, count=get_comment_count(db, post_id))

@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    comment_id: str,
    current_user: Profile = Depends(get_current_user),
) -> None:
    """Delete a comment; only its author may do this"""
    comment = get_comment(db, comment_id=comment_id)
    if not comment or comment.post_id != post_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found"
        )

    if comment.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )

    delete_comment(db, comment)
