from sqlalchemy import Column, String

from app.db.session import Base

class Topic(Base):
    __tablename__ = "topics"

    id = Column(String, primary_key=True, index=True)
    # Case-sensitive as stored: "News" and "news" are distinct topics
    name = Column(String, unique=True, index=True, nullable=False)
