from typing import Dict, Iterable, List, Optional
import logging
from sqlalchemy.orm import Session

from app.modules.user_management.models.user import Profile
from app.modules.user_management.schemas.user import UserUpdate

logger = logging.getLogger("app")

DELETED_USER = "Deleted User"

def get_user(db: Session, user_id: str) -> Optional[Profile]:
    """Get profile by ID"""
    return db.query(Profile).filter(Profile.id == user_id).first()

def get_user_by_username(db: Session, username: str) -> Optional[Profile]:
    """Get profile by username"""
    return db.query(Profile).filter(Profile.username == username).first()

def get_user_by_email(db: Session, email: str) -> Optional[Profile]:
    """Get profile by email"""
    return db.query(Profile).filter(Profile.email == email).first()

def get_users(db: Session, skip: int = 0, limit: int = 100) -> List[Profile]:
    """Get list of profiles ordered by username"""
    return db.query(Profile).order_by(Profile.username).offset(skip).limit(limit).all()

def get_users_by_ids(db: Session, user_ids: Iterable[str]) -> List[Profile]:
    """Batch lookup by id; unknown ids are simply absent from the result"""
    ids = list(set(user_ids))
    if not ids:
        return []
    return db.query(Profile).filter(Profile.id.in_(ids)).all()

def get_users_by_usernames(db: Session, usernames: Iterable[str]) -> List[Profile]:
    """Batch lookup by username; unknown names are simply absent from the result"""
    names = list(set(usernames))
    if not names:
        return []
    return db.query(Profile).filter(Profile.username.in_(names)).all()

def get_profile_map(db: Session, user_ids: Iterable[str]) -> Dict[str, Profile]:
    """id -> profile for a batch of ids, one query"""
    return {profile.id: profile for profile in get_users_by_ids(db, user_ids)}

def update_user(db: Session, user: Profile, user_in: UserUpdate) -> Profile:
    """Update profile fields; raises ValueError when the new username is taken"""
    update_data = user_in.model_dump(exclude_unset=True)

    new_username = update_data.get("username")
    if new_username and new_username != user.username:
        existing = get_user_by_username(db, new_username)
        if existing and existing.id != user.id:
            raise ValueError("Username is already taken")

    for field, value in update_data.items():
        if value is not None:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    logger.info(f"Updated profile {user.id}")
    return user
