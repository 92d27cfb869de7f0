"""Database engine, session factory and dependency injection.

Provides the engine factory used by the app and the admin servers, plus the
decorator that hands a per-request ``UserService`` to Flask route handlers.
"""

from functools import wraps
import logging

from flask import current_app
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from userapi.repositories import UserRepository
from userapi.services import UserService

logger = logging.getLogger(__name__)


def build_engine(db_uri: str, echo: bool = False) -> Engine:
    """Create an engine configured for the database type.

    Args:
        db_uri: SQLAlchemy database URL
        echo: Log SQL statements

    Returns:
        SQLAlchemy engine
    """
    if db_uri.startswith('postgresql'):
        return create_engine(
            db_uri,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=echo,
        )

    if db_uri.startswith('sqlite'):
        connect_args = {"check_same_thread": False}
        if db_uri in ('sqlite://', 'sqlite:///:memory:'):
            # one shared connection so every thread sees the same in-memory database
            return create_engine(db_uri, connect_args=connect_args,
                                 poolclass=StaticPool, echo=echo)
        return create_engine(db_uri, connect_args=connect_args, echo=echo)

    return create_engine(db_uri, pool_pre_ping=True, echo=echo)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_user_service(db) -> UserService:
    """Wire a user service to a database session.

    Args:
        db: Database session

    Returns:
        UserService instance
    """
    return UserService(UserRepository(db))


def with_user_service(func):
    """Decorator to inject a request-scoped ``UserService`` into route handlers.

    Usage:
        @bp.route('/users')
        @with_user_service
        def list_users(service: UserService):
            return jsonify([u.to_dict() for u in service.list_all()])
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        session_factory = current_app.extensions["db_session_factory"]
        with session_factory() as db:
            return func(get_user_service(db), *args, **kwargs)
    return wrapper
