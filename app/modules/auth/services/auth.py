import re
import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from app.core.security import get_password_hash, verify_password
from app.modules.user_management.models.user import Profile
from app.modules.user_management.services.user import get_user_by_email, get_user_by_username

logger = logging.getLogger("app")

_INVALID_USERNAME_CHARS = re.compile(r"[^a-zA-Z0-9._]")

def derive_username(email: str, preferred: Optional[str] = None) -> str:
    """Username from provider metadata, falling back to the email local-part"""
    candidate = preferred or (email or "").split("@")[0]
    candidate = _INVALID_USERNAME_CHARS.sub("", candidate)
    return candidate or "user"

def generate_unique_username(db: Session, base_username: str) -> str:
    """Append a numeric suffix until the username is free"""
    username = base_username
    suffix = 1
    while get_user_by_username(db, username):
        username = f"{base_username}{suffix}"
        suffix += 1
    return username

def create_profile(
    db: Session,
    email: str,
    username: str,
    password: Optional[str] = None,
    avatar_url: Optional[str] = None,
    auth_provider: str = "email",
) -> Profile:
    profile = Profile(
        id=str(uuid.uuid4()),
        email=email,
        username=generate_unique_username(db, username),
        hashed_password=get_password_hash(password) if password else None,
        avatar_url=avatar_url,
        auth_provider=auth_provider,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info(f"Created profile {profile.id} ({profile.username}) via {auth_provider}")
    return profile

def register_user(db: Session, email: str, password: str, username: Optional[str] = None) -> Profile:
    """Sign up with email and password; raises ValueError if the email is taken"""
    if get_user_by_email(db, email):
        raise ValueError("Email is already registered")
    return create_profile(db, email, derive_username(email, username), password=password)

def authenticate(db: Session, email: str, password: str) -> Optional[Profile]:
    """Return the profile for valid email/password credentials, otherwise None"""
    user = get_user_by_email(db, email.lower())
    if not user or not user.hashed_password:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
