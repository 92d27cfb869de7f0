"""Validation module for API input validation.

Provides Marshmallow schemas for all API endpoints.
"""

from .schemas import UserSchema, user_schema

__all__ = ['UserSchema', 'user_schema']
