"""Firebase authentication service for Google Sign-In"""
import logging
import os
from typing import Optional, Dict, Any, Tuple

import firebase_admin
from firebase_admin import credentials, auth
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import create_access_token
from app.modules.auth.schemas.auth import GoogleSignInRequest
from app.modules.auth.services.auth import create_profile, derive_username
from app.modules.user_management.models.user import Profile
from app.modules.user_management.services.user import get_user_by_email

logger = logging.getLogger("app")

_firebase_initialized = False

def initialize_firebase() -> bool:
    """Initialize the Firebase app on first use"""
    global _firebase_initialized

    if _firebase_initialized:
        return True

    try:
        service_account_path = settings.FIREBASE_SERVICE_ACCOUNT_PATH
        if service_account_path and os.path.exists(service_account_path):
            cred = credentials.Certificate(service_account_path)
            firebase_admin.initialize_app(cred)
            logger.info(f"Firebase initialized with service account from {service_account_path}")
        else:
            firebase_admin.initialize_app()
            logger.warning("Firebase initialized without explicit credentials")

        _firebase_initialized = True
        return True
    except Exception as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        return False

def verify_firebase_token(token: str) -> Tuple[bool, Optional[Dict[str, Any]]]:
    """Verifies Firebase ID token and extracts user data"""
    if not initialize_firebase():
        logger.error("Cannot verify token: Firebase not initialized")
        return False, None

    try:
        decoded_token = auth.verify_id_token(token)
        logger.info(f"Firebase token verified for user: {decoded_token.get('email')}")
        return True, {
            "uid": decoded_token.get("uid"),
            "email": decoded_token.get("email"),
            "name": decoded_token.get("name"),
            "picture": decoded_token.get("picture"),
        }
    except Exception as e:
        logger.error(f"Firebase token verification failed: {type(e).__name__}: {e}")
        return False, None

def _update_existing_user(db: Session, user: Profile, google_data: Dict[str, Any]) -> Profile:
    """Fill in the avatar from Google if the profile has none"""
    if google_data.get("picture") and not user.avatar_url:
        user.avatar_url = google_data.get("picture")
        db.commit()
        db.refresh(user)
    return user

def get_or_create_user_from_google(db: Session, google_data: Dict[str, Any]) -> Tuple[Profile, bool]:
    """Gets or creates a profile based on Google authentication data"""
    email = google_data.get("email")
    if not email:
        raise ValueError("Email is required for Google authentication")
    email = email.lower()

    user = get_user_by_email(db, email)
    if user:
        return _update_existing_user(db, user, google_data), False

    # Display names may contain spaces, so only the email local-part is used
    new_user = create_profile(
        db,
        email=email,
        username=derive_username(email),
        avatar_url=google_data.get("picture"),
        auth_provider="google",
    )
    return new_user, True

def authenticate_with_google(db: Session, google_signin: GoogleSignInRequest) -> Tuple[bool, Dict[str, Any]]:
    """Authenticates a user with Google Sign-In credentials"""
    success, google_data = verify_firebase_token(google_signin.firebase_token)
    if not success or not google_data:
        return False, {"error": "Invalid Firebase token"}

    request_email = google_signin.email
    token_email = (google_data.get("email") or "").lower()
    if request_email and token_email and request_email != token_email:
        logger.warning(f"Email mismatch: {request_email} vs {token_email}")
        return False, {"error": "Email mismatch between request and token"}

    if google_signin.photo_url and not google_data.get("picture"):
        google_data["picture"] = google_signin.photo_url

    try:
        user, is_new_user = get_or_create_user_from_google(db, google_data)
    except ValueError as e:
        return False, {"error": str(e)}

    logger.info(f"Google authentication successful for user ID: {user.id}")
    return True, {
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user_id": user.id,
        "is_new_user": is_new_user,
    }
