"""
Authentication Endpoints Module

This module provides authentication endpoints for user registration, login, and logout.
The system supports both JWT bearer token authentication and HTTP-only cookie-based
authentication for browser clients.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status, Response
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select
from datetime import timedelta
from app.db.session import get_db
from app.models.user import User
from app.core.security import verify_password, get_password_hash, create_access_token
from app.core.config import settings
from app.schemas.auth import Token, UserRegister
from app.schemas.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=UserRead, status_code=201)
def register_user(user_in: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user account.

    Creates a new user with the provided email and password. The password is
    automatically hashed before storage.

    Returns:
        UserRead: The newly created user object (password hash is excluded from response)

    Raises:
        HTTPException 400: If a user with this email already exists
    """
    # Check if email is already registered
    user = db.exec(select(User).where(User.email == user_in.email)).first()
    if user:
        raise HTTPException(
            status_code=400,
            detail="User with this email already exists."
        )

    # Create new user with hashed password
    db_user = User(
        email=user_in.email,
        password=get_password_hash(user_in.password),  # Hash password using bcrypt
        full_name=user_in.full_name,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Registered user %s", db_user.id)
    return db_user

@router.post("/login", response_model=Token)
def login(response: Response, db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()):
    """
    Authenticate a user and issue an access token.

    Validates the user's credentials and returns a JWT access token. The token is also
    set as an HTTP-only cookie for browser clients.

    Note: OAuth2PasswordRequestForm uses 'username' field, but we treat it as email.

    Raises:
        HTTPException 401: If credentials are invalid
    """
    # Look up user by email (form_data.username contains the email)
    user = db.exec(select(User).where(User.email == form_data.username)).first()

    # Verify user exists and password is correct
    if not user or not verify_password(form_data.password, user.password):
        logger.warning("Failed login for %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Generate JWT access token with configurable expiration
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        subject=user.email, expires_delta=access_token_expires
    )

    # httponly=True prevents JavaScript access to the cookie
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,  # Convert minutes to seconds
        samesite="lax"
    )

    return {"access_token": access_token, "token_type": "bearer"}

@router.get("/logout")
def logout():
    """
    Log out the current user by clearing their authentication cookie.

    API clients can simply discard their token.
    """
    response = JSONResponse({"status": "success", "detail": "Logged out"})
    response.delete_cookie("access_token")
    return response
