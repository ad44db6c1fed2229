import os

# Configure the app before importing it so nothing touches an on-disk database.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from postshare import crud  # noqa: E402
from postshare.auth import create_access_token, hash_password  # noqa: E402
from postshare.database import Base, get_db  # noqa: E402
from postshare.main import app  # noqa: E402
from postshare.models import Post, User  # noqa: E402

# In-memory SQLite database shared across connections via StaticPool.
TEST_DATABASE_URL = "sqlite://"

DEFAULT_PASSWORD = "secret123"

engine_test = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine_test,
)


@pytest.fixture()
def db_session():
    """Provide a fresh test database session for each test.

    The schema is dropped and recreated for every test function,
    ensuring complete isolation between tests.
    """
    Base.metadata.drop_all(bind=engine_test)
    Base.metadata.create_all(bind=engine_test)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def api_app(db_session):
    """The FastAPI app with `get_db` pointed at the in-memory test database."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(api_app):
    with TestClient(api_app) as c:
        yield c


@pytest.fixture()
def user_factory(db_session):
    """Create users directly in the test database, bypassing the HTTP API."""

    def _create_user(
        email: str,
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> User:
        return crud.create_user(
            db_session,
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
        )

    return _create_user


@pytest.fixture()
def post_factory(db_session):
    def _create_post(
        author: User,
        title: str = "A post",
        content: str = "Some content",
        published: bool = True,
    ) -> Post:
        return crud.create_post(
            db_session,
            {"title": title, "content": content, "published": published},
            author_id=author.id,
        )

    return _create_post


@pytest.fixture()
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers
