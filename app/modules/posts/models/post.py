from datetime import datetime

from sqlalchemy import Column, String, DateTime, Text, ForeignKey

from app.db.session import Base
from app.db.types import StringList

class Post(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    user_id = Column(String, ForeignKey("profiles.id"), index=True, nullable=False)
    image_urls = Column(StringList, nullable=False, default=list)
    mentions = Column(StringList, nullable=True)  # profile ids
    topics = Column(StringList, nullable=True)  # topic ids
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    scheduled_at = Column(DateTime, nullable=True)
