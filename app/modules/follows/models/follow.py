from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint

from app.db.session import Base

class Follow(Base):
    __tablename__ = "follows"

    follower_id = Column(String, ForeignKey('profiles.id'), primary_key=True)
    following_id = Column(String, ForeignKey('profiles.id'), primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('follower_id', 'following_id', name='unique_follow'),
        CheckConstraint('follower_id != following_id', name='no_self_follow'),
    )
