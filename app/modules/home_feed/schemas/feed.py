from typing import List, Optional
from pydantic import BaseModel

from app.modules.posts.schemas.post import PostWithCounts

class FeedResponse(BaseModel):
    """Feed response model returned to client"""
    feed: str
    items: List[PostWithCounts]
    total: int
    has_more: bool
    topic: Optional[str] = None
