import os
import sys

# Ensure repo root is on sys.path so tests can import the userapi package
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from userapi import create_app
from userapi.models import Base
from userapi.repositories import UserRepository
from userapi.services import UserService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def in_memory_session(engine):
    Session = sessionmaker(bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_repo(in_memory_session):
    return UserRepository(in_memory_session)


@pytest.fixture
def user_service(user_repo):
    return UserService(user_repo)


@pytest.fixture
def app(tmp_path):
    db_file = tmp_path / "test_users.db"
    app = create_app({"DATABASE_URL": f"sqlite:///{db_file}", "TESTING": True})
    app.init_db()
    yield app
    app.extensions["db_engine"].dispose()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
