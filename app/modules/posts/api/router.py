from datetime import datetime
from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form, Query
from sqlalchemy.orm import Session

from app.core.storage import r2_storage
from app.db.session import get_db
from app.deps import get_current_user, get_current_user_optional
from app.modules.home_feed.schemas.feed import FeedResponse
from app.modules.home_feed.services.feed import get_global_feed
from app.modules.media.router import get_media_service
from app.modules.media.service import MediaService
from app.modules.posts.schemas.post import PostWithCounts
from app.modules.posts.services.post import (
    create_post, delete_post, get_post, get_visible_post, serialize_posts,
    validate_post_content, validate_scheduled_at
)
from app.modules.user_management.models.user import Profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="")

@router.get("/", response_model=FeedResponse)
@router.get("", response_model=FeedResponse)
def read_posts(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    """
    Global timeline: every visible post, newest first.
    """
    return get_global_feed(db, current_user.id if current_user else None, skip, limit)

@router.post("/", response_model=PostWithCounts, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=PostWithCounts, status_code=status.HTTP_201_CREATED)
async def create_new_post(
    *,
    db: Session = Depends(get_db),
    content: str = Form(...),
    images: List[UploadFile] = File(None),
    scheduled_at: Optional[datetime] = Form(None),
    current_user: Profile = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service),
) -> Any:
    """
    Compose a post with up to four images and an optional publish time.
    """
    try:
        validate_post_content(content)
        validate_scheduled_at(scheduled_at)
        validated = await media_service.read_images(images)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    image_urls: List[str] = []
    try:
        image_urls = media_service.upload_images(validated, current_user.id)
        post = create_post(db, current_user.id, content, image_urls, scheduled_at)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating post for {current_user.id}: {str(e)}")
        db.rollback()
        for url in image_urls:
            r2_storage.delete_file(url)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create post"
        )

    return serialize_posts(db, [post], {post.id: 0})[0]

@router.get("/{post_id}", response_model=PostWithCounts)
def read_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    """
    Get post by ID. Scheduled posts are only visible to their author until published.
    """
    post = get_visible_post(db, post_id, current_user.id if current_user else None)
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    return serialize_posts(db, [post])[0]

@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: Profile = Depends(get_current_user),
) -> None:
    """
    Delete a post together with its comments and stored images.
    """
    post = get_post(db, post_id=post_id)
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )

    if post.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions",
        )

    try:
        delete_post(db, post, storage=r2_storage)
    except Exception as e:
        logger.error(f"Error deleting post {post_id}: {str(e)}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete post"
        )
