from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel

class ContentSegment(BaseModel):
    """One renderable piece of a post body"""
    type: str  # "text", "mention" or "topic"
    text: str
    href: Optional[str] = None
    user_id: Optional[str] = None
    topic: Optional[str] = None

class PostBase(BaseModel):
    content: str
    image_urls: List[str] = []
    scheduled_at: Optional[datetime] = None

class PostInDBBase(PostBase):
    id: str
    user_id: str
    mentions: List[str] = []
    topics: List[str] = []
    created_at: datetime

class Post(PostInDBBase):
    """Post returned to client; content has mentions rendered as @username"""
    username: str
    avatar_url: Optional[str] = None
    segments: List[ContentSegment] = []
    is_scheduled: bool = False

class PostWithCounts(Post):
    """Post with its comment count"""
    comment_count: int = 0
