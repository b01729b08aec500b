from typing import Optional
from datetime import datetime
from pydantic import BaseModel

class CommentBase(BaseModel):
    content: str

class CommentCreate(CommentBase):
    pass

class CommentInDBBase(CommentBase):
    id: str
    post_id: str
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True

class Comment(CommentInDBBase):
    """Comment returned to client, with its author's display fields"""
    username: Optional[str] = None
    avatar_url: Optional[str] = None

class CommentedPost(BaseModel):
    """Summary of the post a comment was left on"""
    id: str
    content: str
    user_id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None

class CommentWithPost(Comment):
    post: Optional[CommentedPost] = None

class CommentCount(BaseModel):
    post_id: str
    count: int
