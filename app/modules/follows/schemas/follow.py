from pydantic import BaseModel

class FollowStatus(BaseModel):
    """Follow state between the current user and another user"""
    user_id: str
    is_following: bool
    followers_count: int
