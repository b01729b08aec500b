"""Authentication router: email/password, Google Sign-In and session restore"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.core.security import create_access_token
from app.db.session import get_db
from app.deps import AuthSession, get_auth_session
from app.modules.auth.schemas.auth import (
    GoogleSignInRequest,
    GoogleSignInResponse,
    SessionResponse,
    SignUpRequest,
    Token,
)
from app.modules.auth.services.auth import authenticate, register_user
from app.modules.auth.services.firebase_auth import authenticate_with_google
from app.modules.user_management.schemas.user import UserWithEmail


router = APIRouter()

@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
def signup(*, db: Session = Depends(get_db), request: SignUpRequest) -> Token:
    """Create an account with email and password"""
    try:
        user = register_user(db, request.email, request.password, request.username)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return Token(access_token=create_access_token(user.id))

@router.post("/login", response_model=Token)
def login(
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Token:
    """OAuth2 compatible login; the form's username field carries the email"""
    user = authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(access_token=create_access_token(user.id))

@router.post("/google-signin", response_model=GoogleSignInResponse)
def google_signin(*, db: Session = Depends(get_db), google_signin: GoogleSignInRequest):
    """Authenticate user with Google Sign-In"""
    success, result = authenticate_with_google(db, google_signin)

    if not success:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.get("error", "Authentication failed"),
            headers={"WWW-Authenticate": "Bearer"},
        )

    return result

@router.get("/session", response_model=SessionResponse)
def get_session(session: AuthSession = Depends(get_auth_session)):
    """Restore the session for the bearer token"""
    return SessionResponse(
        access_token=session.access_token,
        user=UserWithEmail.model_validate(session.user),
    )
