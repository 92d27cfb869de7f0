from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from userapi.exceptions import UserServiceError


@dataclass
class User:
    id: Optional[int]
    name: str
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class UserResult:
    """Outcome of a service call: either a user or the error explaining its absence."""
    user: Optional[User] = None
    error: Optional[UserServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def found(cls, user: User) -> "UserResult":
        return cls(user=user)

    @classmethod
    def failed(cls, error: UserServiceError) -> "UserResult":
        return cls(error=error)
