import os

os.environ.setdefault("ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LOG_DIR", "logs")
os.environ.setdefault("TOKEN_CLEANUP_INTERVAL_SECONDS", "0")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.database import Base
from models.auth_tokens import AuthToken, RememberFlag, TokenType
from services.token_service import TokenService
from utils.deps import get_db

# SYNC SQLite for testing (matches sync repository layer)
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(session):
    """Opens extra sessions on the same test database."""
    return TestingSessionLocal


@pytest.fixture
def make_token(session):
    """
    Inserts a raw token row, bypassing the service, so tests control every
    column including last_activity.
    """
    counter = {"n": 0}

    def _make(uid="alice", name="Mobile app", token_type=TokenType.TEMPORARY,
              remember=RememberFlag.DO_NOT_REMEMBER, last_activity=100, **kwargs):
        counter["n"] += 1
        login_name = kwargs.pop("login_name", uid)
        value = kwargs.pop("token", f"hash-{counter['n']}")
        token = AuthToken(
            uid=uid,
            login_name=login_name,
            name=name,
            token=value,
            type=int(token_type),
            remember=int(remember),
            last_activity=last_activity,
            **kwargs
        )
        session.add(token)
        session.commit()
        session.refresh(token)
        return token

    return _make


@pytest.fixture
def issued_token(session):
    """A freshly issued (secret, token) pair for alice."""
    return TokenService.generate_token(session, uid="alice", login_name="alice@example.com", name="Firefox")


@pytest.fixture
async def client(session: Session):
    """
    Yields an HTTP client that interacts with the app using the test database.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
