from typing import List, Optional
import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.modules.follows.models.follow import Follow
from app.modules.user_management.models.user import Profile

logger = logging.getLogger(__name__)

def get_follow(db: Session, follower_id: str, following_id: str) -> Optional[Follow]:
    """Get the follow edge follower -> following"""
    return db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.following_id == following_id
    ).first()

def is_following(db: Session, follower_id: str, following_id: str) -> bool:
    """Check whether follower currently follows following"""
    return get_follow(db, follower_id, following_id) is not None

def follow(db: Session, follower_id: str, following_id: str) -> bool:
    """Create the edge follower -> following.

    Returns True when a new edge was created and False when it already
    existed. Raises ValueError for a self-follow.
    """
    if follower_id == following_id:
        raise ValueError("Cannot follow yourself")

    if get_follow(db, follower_id, following_id):
        return False

    db.add(Follow(follower_id=follower_id, following_id=following_id))
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with an identical request: the edge exists
        db.rollback()
        logger.info(f"Follow {follower_id} -> {following_id} already exists")
        return False
    logger.info(f"Created follow: {follower_id} -> {following_id}")
    return True

def unfollow(db: Session, follower_id: str, following_id: str) -> bool:
    """Remove the edge follower -> following; False when there was none"""
    deleted = db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.following_id == following_id
    ).delete(synchronize_session=False)
    db.commit()
    if deleted:
        logger.info(f"Removed follow: {follower_id} -> {following_id}")
    return bool(deleted)

def get_following_ids(db: Session, user_id: str) -> List[str]:
    """Ids of the users user_id follows"""
    rows = db.query(Follow.following_id).filter(Follow.follower_id == user_id).all()
    return [row.following_id for row in rows]

def get_follower_ids(db: Session, user_id: str) -> List[str]:
    """Ids of the users following user_id"""
    rows = db.query(Follow.follower_id).filter(Follow.following_id == user_id).all()
    return [row.follower_id for row in rows]

def get_following(db: Session, user_id: str) -> List[Profile]:
    return (
        db.query(Profile)
        .join(Follow, Follow.following_id == Profile.id)
        .filter(Follow.follower_id == user_id)
        .order_by(Profile.username)
        .all()
    )

def get_followers(db: Session, user_id: str) -> List[Profile]:
    return (
        db.query(Profile)
        .join(Follow, Follow.follower_id == Profile.id)
        .filter(Follow.following_id == user_id)
        .order_by(Profile.username)
        .all()
    )

def count_followers(db: Session, user_id: str) -> int:
    return db.query(func.count()).select_from(Follow).filter(Follow.following_id == user_id).scalar() or 0

def count_following(db: Session, user_id: str) -> int:
    return db.query(func.count()).select_from(Follow).filter(Follow.follower_id == user_id).scalar() or 0
