"""
Pytest configuration and fixtures for the test suite.
"""
import os
from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Set test environment before importing app
os.environ["ENV"] = "development"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-testing-purposes-only-32chars"
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

from filekeeper.core.deps import get_db
from filekeeper.main import app
from filekeeper.models import Base
from filekeeper.models.category import Category
from filekeeper.models.folder import Folder
from filekeeper.models.user import User
from filekeeper.services.auth import create_access_token, get_password_hash
from filekeeper.services.hierarchy import HierarchyEngine
from filekeeper.services.seeder import seed_default_folders

# Use SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite:///./test.db"
)

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in SQLALCHEMY_TEST_DATABASE_URL else {},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""

    def override_get_db_with_session():
        """Return the test database session."""
        yield db

    app.dependency_overrides[get_db] = override_get_db_with_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def hierarchy(db: Session) -> HierarchyEngine:
    """Hierarchy engine bound to the test session."""
    return HierarchyEngine(db)


def _make_user(db: Session, username: str, password: str, display_name: str) -> User:
    user = User(
        username=username,
        password_hash=get_password_hash(password),
        display_name=display_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a test user."""
    return _make_user(db, "testuser", "TestPassword123!", "Test User")


@pytest.fixture
def other_user(db: Session) -> User:
    """Create another test user."""
    return _make_user(db, "otheruser", "OtherPassword123!", "Other User")


@pytest.fixture
def folders(db: Session, test_user: User) -> Dict[str, Folder]:
    """Seed the test user's default folders, keyed by name."""
    return {f.name: f for f in seed_default_folders(db, test_user.id)}


@pytest.fixture
def other_folders(db: Session, other_user: User) -> Dict[str, Folder]:
    """Seed the other user's default folders, keyed by name."""
    return {f.name: f for f in seed_default_folders(db, other_user.id)}


@pytest.fixture
def category(db: Session) -> Category:
    """Create a category."""
    category = Category(name="Electronics", color="#3366ff", icon="icons/electronics.svg")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Create authentication headers for test user."""
    return {"Authorization": f"Bearer {create_access_token(test_user)}"}


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    """Create authentication headers for the other user."""
    return {"Authorization": f"Bearer {create_access_token(other_user)}"}


@pytest.fixture
def authenticated_client(client: TestClient, auth_headers: dict) -> TestClient:
    """Create an authenticated test client."""
    client.headers.update(auth_headers)
    return client
