from typing import Any, List, Optional
import logging
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user, get_current_user_optional
from app.core.storage import r2_storage
from app.modules.follows.services.follow import count_followers, count_following, get_following_ids, is_following
from app.modules.media.service import validate_image
from app.modules.posts.comments.schemas.comment import CommentWithPost
from app.modules.posts.comments.services.comment import get_comments_by_user
from app.modules.user_management.models.user import Profile
from app.modules.user_management.schemas.user import (
    User as UserSchema, UserListItem, UserProfile, UserUpdate, UserWithEmail
)
from app.modules.user_management.services.user import get_users, get_user_by_username, update_user, get_user

router = APIRouter()
logger = logging.getLogger("app")

def _validate_user(db: Session, user_id: str) -> Profile:
    """Validate user exists and return user object or raise HTTPException"""
    user = get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user

@router.get("/me", response_model=UserWithEmail)
def read_user_me(
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """Get current user"""
    return current_user

@router.put("/me", response_model=UserWithEmail)
def update_user_me(
    *,
    db: Session = Depends(get_db),
    user_in: UserUpdate,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """Update current user"""
    try:
        return update_user(db, current_user, user_in)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/me/avatar", response_model=UserWithEmail)
async def upload_avatar(
    *,
    db: Session = Depends(get_db),
    avatar: UploadFile = File(...),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """Upload a new avatar image for the current user"""
    content = await avatar.read()
    try:
        validate_image(avatar.filename, avatar.content_type, len(content))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        avatar_url = r2_storage.upload_bytes(content, avatar.filename, avatar.content_type, current_user.id)
    except Exception as e:
        logger.error(f"Error uploading avatar for {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload avatar"
        )

    logger.info(f"Uploaded avatar for {current_user.id}: {avatar_url}")
    return update_user(db, current_user, UserUpdate(avatar_url=avatar_url))

@router.get("/by-username/{username}", response_model=UserSchema)
def read_user_by_username(
    username: str,
    db: Session = Depends(get_db),
) -> Any:
    """Get a specific user by username"""
    user = get_user_by_username(db, username=username)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user

@router.get("", response_model=List[UserListItem])
@router.get("/", response_model=List[UserListItem])
def read_users(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    """User directory, with whether the current user follows each entry"""
    following_ids = set(get_following_ids(db, current_user.id)) if current_user else set()
    return [
        UserListItem(
            id=user.id,
            username=user.username,
            avatar_url=user.avatar_url,
            created_at=user.created_at,
            is_following=user.id in following_ids,
        )
        for user in get_users(db, skip=skip, limit=limit)
    ]

@router.get("/{user_id}", response_model=UserSchema)
def read_user_by_id(
    user_id: str,
    db: Session = Depends(get_db),
) -> Any:
    """Get a specific user by id"""
    return _validate_user(db, user_id)

@router.get("/{user_id}/profile", response_model=UserProfile)
def read_user_profile(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    """Profile header: the user plus follower counts and follow state"""
    user = _validate_user(db, user_id)
    viewer_id = current_user.id if current_user else None
    return UserProfile(
        id=user.id,
        username=user.username,
        avatar_url=user.avatar_url,
        created_at=user.created_at,
        followers_count=count_followers(db, user.id),
        following_count=count_following(db, user.id),
        is_following=bool(viewer_id) and is_following(db, viewer_id, user.id),
        is_self=viewer_id == user.id,
    )

@router.get("/{user_id}/comments", response_model=List[CommentWithPost])
def read_user_comments(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> Any:
    """Comments a user has written, each with the post it belongs to"""
    _validate_user(db, user_id)
    return get_comments_by_user(db, user_id, current_user.id if current_user else None)
