from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core import security
from app.core.config import settings
from app.db.session import get_db
from app.modules.user_management.models.user import Profile
from app.modules.user_management.services.user import get_user

# OAuth2 token URL
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


@dataclass
class AuthSession:
    """The signed-in user and the bearer token that identified them"""
    user: Profile
    access_token: str

    @property
    def user_id(self) -> str:
        return self.user.id


def _user_from_token(db: Session, token: str) -> Profile:
    user_id = security.verify_access_token(token)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = get_user(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_auth_session(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> AuthSession:
    """
    Dependency for getting the current authenticated session
    """
    return AuthSession(user=_user_from_token(db, token), access_token=token)


def get_current_user(session: AuthSession = Depends(get_auth_session)) -> Profile:
    """
    Dependency for getting current authenticated user
    """
    return session.user


def get_current_user_optional(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(optional_oauth2_scheme),
) -> Optional[Profile]:
    """
    Dependency for endpoints that anonymous visitors may also read
    """
    if not token:
        return None
    return _user_from_token(db, token)
