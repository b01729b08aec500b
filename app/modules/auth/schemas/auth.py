from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

from app.modules.user_management.schemas.user import UserWithEmail

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

def _normalize_email(email: Optional[str]) -> Optional[str]:
    """Normalize email to lowercase."""
    return email.lower() if email else None

class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    username: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

class GoogleSignInRequest(BaseModel):
    firebase_token: str
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    photo_url: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)

class GoogleSignInResponse(Token):
    user_id: str
    is_new_user: bool = False

class SessionResponse(BaseModel):
    """Restored session: the bearer token and who it belongs to"""
    access_token: str
    token_type: str = "bearer"
    user: UserWithEmail
