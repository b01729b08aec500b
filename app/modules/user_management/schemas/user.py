import re
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, field_validator

from app.modules.posts.parsers import USERNAME_PATTERN

_USERNAME_REGEX = re.compile(rf"^{USERNAME_PATTERN}$")

class UserBase(BaseModel):
    username: str
    avatar_url: Optional[str] = None

class UserUpdate(BaseModel):
    username: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        # Usernames must stay mentionable with the @username grammar
        if v is not None and not _USERNAME_REGEX.match(v):
            raise ValueError("Username may only contain letters, digits, '.' and '_'")
        return v

class User(UserBase):
    """Public profile projection returned to clients"""
    id: str
    created_at: datetime

    class Config:
        from_attributes = True

class UserWithEmail(User):
    """Session-shaped projection for the signed-in user"""
    email: Optional[str] = None

class UserListItem(User):
    is_following: bool = False

class UserProfile(User):
    """Profile page header"""
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False
    is_self: bool = False
