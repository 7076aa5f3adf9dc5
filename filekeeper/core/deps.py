"""
Common dependencies for FastAPI endpoints.
"""
from typing import Generator
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from filekeeper.db.session import SessionLocal
from filekeeper.models.user import User
from filekeeper.services.auth import decode_access_token, get_user_by_id
from filekeeper.services.hierarchy import HierarchyEngine

# HTTP Bearer token security scheme
security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token into the acting user.

    Raises:
        HTTPException: 401 if the token is invalid or the user no longer exists
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = decode_access_token(credentials.credentials)
    if token_data is None or token_data.user_id is None:
        raise credentials_exception

    try:
        user_id = UUID(token_data.user_id)
    except ValueError:
        raise credentials_exception

    user = get_user_by_id(db, user_id)
    if user is None:
        raise credentials_exception

    return user


def get_hierarchy_engine(db: Session = Depends(get_db)) -> HierarchyEngine:
    """Hierarchy engine bound to the request's session."""
    return HierarchyEngine(db)


def parse_uuid(value: str, name: str = "ID") -> UUID:
    """Parse a path parameter into a UUID, 400 on malformed input."""
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name}",
        )
