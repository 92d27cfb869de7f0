"""Flask routes for the user API."""

from .user_routes import bp as users_bp

__all__ = ['users_bp']
