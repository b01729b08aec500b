from typing import Any, List
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user
from app.modules.follows.schemas.follow import FollowStatus
from app.modules.follows.services.follow import (
    count_followers, follow, get_followers, get_following, is_following, unfollow
)
from app.modules.user_management.models.user import Profile
from app.modules.user_management.schemas.user import User as UserSchema
from app.modules.user_management.services.user import get_user

router = APIRouter()
logger = logging.getLogger("app")

def _validate_user(db: Session, user_id: str) -> Profile:
    user = get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user

def _status(db: Session, follower_id: str, user_id: str) -> FollowStatus:
    return FollowStatus(
        user_id=user_id,
        is_following=is_following(db, follower_id, user_id),
        followers_count=count_followers(db, user_id),
    )

@router.post("/{user_id}", response_model=FollowStatus)
def follow_user(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """Follow a user; following someone already followed is a no-op"""
    _validate_user(db, user_id)
    try:
        follow(db, current_user.id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return _status(db, current_user.id, user_id)

@router.delete("/{user_id}", response_model=FollowStatus)
def unfollow_user(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """Stop following a user; a missing edge is a no-op"""
    _validate_user(db, user_id)
    unfollow(db, current_user.id, user_id)
    return _status(db, current_user.id, user_id)

@router.get("/{user_id}/status", response_model=FollowStatus)
def follow_status(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    _validate_user(db, user_id)
    return _status(db, current_user.id, user_id)

@router.get("/{user_id}/followers", response_model=List[UserSchema])
def read_followers(*, db: Session = Depends(get_db), user_id: str) -> Any:
    _validate_user(db, user_id)
    return get_followers(db, user_id)

@router.get("/{user_id}/following", response_model=List[UserSchema])
def read_following(*, db: Session = Depends(get_db), user_id: str) -> Any:
    _validate_user(db, user_id)
    return get_following(db, user_id)
