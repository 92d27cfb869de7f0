"""User repository implementation.

Handles the lookup and search queries for the User model on top of the
generic CRUD operations of ``BaseRepository``.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from userapi.models import User

from .base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db_session: Session):
        """Initialize user repository.

        Args:
            db_session: SQLAlchemy database session
        """
        super().__init__(db_session, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email (exact, case-sensitive match).

        Args:
            email: Email to search for

        Returns:
            User instance if found, None otherwise
        """
        return self.db.query(User).filter(User.email == email).first()

    def search_by_name(self, fragment: str) -> List[User]:
        """Find users whose name contains ``fragment``, ignoring case.

        LIKE wildcards in the fragment are escaped, so ``%`` and ``_`` match
        literally. An empty fragment matches every user.

        Args:
            fragment: Substring to look for

        Returns:
            Matching users in id order
        """
        return (
            self.db.query(User)
            .filter(User.name.icontains(fragment, autoescape=True))
            .order_by(User.id)
            .all()
        )

    def get_by_email_and_name(self, email: str, name: str) -> Optional[User]:
        """Get the user matching both email and name exactly.

        Args:
            email: Email to match
            name: Name to match

        Returns:
            User instance if found, None otherwise
        """
        return (
            self.db.query(User)
            .filter(and_(User.email == email, User.name == name))
            .first()
        )

    def create_user(self, name: str, email: str) -> User:
        """Create a new user.

        Args:
            name: Display name
            email: Email address, must be unused

        Returns:
            Created user instance

        Raises:
            IntegrityError: If the email is already registered
        """
        return self.create(name=name, email=email)
