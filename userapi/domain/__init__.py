"""Domain layer: plain records and typed operation outcomes."""

from .models import User, UserResult

__all__ = ["User", "UserResult"]
