"""
Authentication API endpoints.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from filekeeper.core.config import settings
from filekeeper.core.deps import get_current_user, get_db
from filekeeper.models.user import User
from filekeeper.schemas.auth import (Token, UserLogin, UserOut, UserRegister,
                                     UserWithToken)
from filekeeper.services.auth import (authenticate_user, create_access_token,
                                      create_user, get_user_by_username)
from filekeeper.services.seeder import seed_default_folders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_with_token(user: User) -> UserWithToken:
    return UserWithToken(
        user=UserOut.model_validate(user),
        token=Token(
            access_token=create_access_token(user),
            token_type="bearer",
            expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        ),
    )


@router.post("/register", response_model=UserWithToken, status_code=status.HTTP_201_CREATED)
def register(
    data: UserRegister,
    db: Session = Depends(get_db),
):
    """
    Register a new user and create their default folders.

    - **username**: Unique username (3-50 characters)
    - **password**: Password (8+ chars with uppercase, lowercase, digit, special char)
    - **display_name**: Display name for the user

    Returns user info and access token on success.
    """
    if get_user_by_username(db, data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This username is already taken",
        )

    user = create_user(
        db=db,
        username=data.username,
        password=data.password,
        display_name=data.display_name,
    )
    seed_default_folders(db, user.id)
    logger.info(f"User registered: {user.username} ({user.id})")

    return _user_with_token(user)


@router.post("/login", response_model=UserWithToken)
def login(
    data: UserLogin,
    db: Session = Depends(get_db),
):
    """
    Authenticate user and return access token.
    """
    user = authenticate_user(db, data.username, data.password)
    if not user:
        logger.info(f"Failed login for username {data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _user_with_token(user)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    """Current user info."""
    return current_user
