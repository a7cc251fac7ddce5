"""Helpers for tests that need a real (in-memory SQLite) database."""

from sqlalchemy.orm import Session, sessionmaker

from warden.core.database import build_engine
from warden.core.security import PasswordHasher
from warden.models import Base

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


def make_session_factory() -> sessionmaker:
    """One fresh in-memory database per call; every session from the factory sees it."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def make_session() -> Session:
    return make_session_factory()()


def fast_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)
