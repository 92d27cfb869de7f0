"""User management service.

Wraps ``UserRepository`` with the business rules of the user API and reports
every miss or conflict as a ``UserResult`` carrying a typed error, so callers
handle absence explicitly.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError

from userapi.domain.models import User, UserResult
from userapi.exceptions import DuplicateEmailError, NotFoundError
from userapi.models import User as ORMUser
from userapi.repositories import UserRepository

logger = logging.getLogger(__name__)


def _map_user(orm: ORMUser) -> User:
    return User(id=orm.id, name=orm.name, email=orm.email)


class UserService:
    """CRUD and search operations over user records."""

    def __init__(self, user_repo: UserRepository):
        """Initialize user service.

        Args:
            user_repo: User repository instance
        """
        self.user_repo = user_repo

    def list_all(self) -> List[User]:
        """Return every user in id order."""
        return [_map_user(u) for u in self.user_repo.get_all()]

    def get_by_id(self, user_id: int) -> UserResult:
        orm = self.user_repo.get_by_id(user_id)
        if orm is None:
            return UserResult.failed(NotFoundError(f"User {user_id} not found"))
        return UserResult.found(_map_user(orm))

    def create(self, candidate: User) -> UserResult:
        """Persist a new user.

        The store's unique constraint on email is the only duplicate check, so
        two concurrent creates with the same email cannot both succeed. Any id
        on the candidate is ignored.

        Args:
            candidate: User to create

        Returns:
            Result holding the stored user with its assigned id, or a
            ``DuplicateEmailError``
        """
        try:
            orm = self.user_repo.create_user(name=candidate.name, email=candidate.email)
        except IntegrityError:
            logger.info(f"Rejected duplicate email {candidate.email}")
            return UserResult.failed(DuplicateEmailError(candidate.email))
        return UserResult.found(_map_user(orm))

    def update(self, user_id: int, new_values: User) -> UserResult:
        """Replace the mutable fields of an existing user.

        The id is kept from the stored record, never taken from ``new_values``.

        Args:
            user_id: Id of the user to update
            new_values: Replacement name and email

        Returns:
            Result holding the updated user, a ``NotFoundError`` when the id
            does not exist (nothing is written), or a ``DuplicateEmailError``
            when the new email belongs to another user
        """
        try:
            orm = self.user_repo.update(user_id, name=new_values.name, email=new_values.email)
        except IntegrityError:
            return UserResult.failed(DuplicateEmailError(new_values.email))
        if orm is None:
            return UserResult.failed(NotFoundError(f"User {user_id} not found"))
        return UserResult.found(_map_user(orm))

    def delete(self, user_id: int) -> UserResult:
        """Hard-delete a user; the result carries the removed record."""
        orm = self.user_repo.get_by_id(user_id, for_update=True)
        if orm is None:
            return UserResult.failed(NotFoundError(f"User {user_id} not found"))
        removed = _map_user(orm)
        self.user_repo.delete_instance(orm)
        return UserResult.found(removed)

    def get_by_email(self, email: str) -> UserResult:
        orm = self.user_repo.get_by_email(email)
        if orm is None:
            return UserResult.failed(NotFoundError(f"No user with email {email}"))
        return UserResult.found(_map_user(orm))

    def search_by_name(self, fragment: str) -> List[User]:
        """Case-insensitive substring search on name; empty list when nothing matches."""
        return [_map_user(u) for u in self.user_repo.search_by_name(fragment)]

    def get_by_email_and_name(self, email: str, name: str) -> UserResult:
        orm = self.user_repo.get_by_email_and_name(email, name)
        if orm is None:
            return UserResult.failed(NotFoundError(f"No user {name} with email {email}"))
        return UserResult.found(_map_user(orm))
