from datetime import datetime

from sqlalchemy import Column, String, DateTime

from app.db.session import Base

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True)
    avatar_url = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)  # Null for Google-only accounts
    auth_provider = Column(String, default="email")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
