"""Configuration management using environment variables.

This module provides centralized configuration management using python-decouple
to read from .env files and environment variables.
"""

from decouple import config
from typing import List


def _csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Base configuration class."""

    # Database
    DATABASE_URL: str = config('DATABASE_URL', default='sqlite:///users.db')

    # Environment
    DEBUG: bool = config('DEBUG', default=False, cast=bool)
    ENVIRONMENT: str = config('ENVIRONMENT', default='development')

    # HTTP API
    HOST: str = config('HOST', default='127.0.0.1')
    PORT: int = config('PORT', default=8080, cast=int)
    CORS_ORIGINS: List[str] = config('CORS_ORIGINS', default='*', cast=_csv)

    # Logging
    LOG_LEVEL: str = config('LOG_LEVEL', default='INFO')
    LOG_FILE: str = config('LOG_FILE', default='')

    # Administrative servers (raw protocol + browser console)
    ADMIN_SERVERS_ENABLED: bool = config('ADMIN_SERVERS_ENABLED', default=True, cast=bool)
    TCP_SERVER_PORT: int = config('TCP_SERVER_PORT', default=9092, cast=int)
    TCP_ALLOW_OTHERS: bool = config('TCP_ALLOW_OTHERS', default=True, cast=bool)
    TCP_IF_NOT_EXISTS: bool = config('TCP_IF_NOT_EXISTS', default=True, cast=bool)
    WEB_SERVER_PORT: int = config('WEB_SERVER_PORT', default=8082, cast=int)
    WEB_ALLOW_OTHERS: bool = config('WEB_ALLOW_OTHERS', default=True, cast=bool)
    DB_USER: str = config('DB_USER', default='sa')
    DB_PASSWORD: str = config('DB_PASSWORD', default='')

    @property
    def is_postgresql(self) -> bool:
        """Check if using PostgreSQL database."""
        return self.DATABASE_URL.startswith('postgresql')

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.DATABASE_URL.startswith('sqlite')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    LOG_LEVEL = 'WARNING'


class TestingConfig(Config):
    """Testing configuration."""
    DATABASE_URL = 'sqlite://'
    DEBUG = True
    ADMIN_SERVERS_ENABLED = False


def get_config() -> Config:
    """Get configuration based on environment."""
    env = config('ENVIRONMENT', default='development')

    if env == 'production':
        return ProductionConfig()
    elif env == 'testing':
        return TestingConfig()
    else:
        return DevelopmentConfig()


# Global config instance
settings = get_config()
