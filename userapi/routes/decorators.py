"""Request handling decorators for API endpoints.

Provides validation, request logging and store-error translation decorators.
Failure responses carry no body; the status code is the whole answer.
"""

import logging
import time
from functools import wraps
from typing import Callable

from flask import g, request
from marshmallow import Schema, ValidationError
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def empty(status: int):
    """Build an empty-body response tuple."""
    return "", status


def validate_json(schema: Schema):
    """Decorator for validating JSON request data using Marshmallow schema.

    The loaded object is stored in ``g.validated_data``. Invalid input never
    reaches the wrapped view.

    Args:
        schema: Marshmallow schema for validation

    Returns:
        Decorated function answering 400 on invalid input
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            json_data = request.get_json(silent=True)
            if not isinstance(json_data, dict):
                logger.warning(f"Rejected non-JSON body on {request.method} {request.path}")
                return empty(400)

            try:
                g.validated_data = schema.load(json_data)
            except ValidationError as err:
                logger.warning(
                    f"Validation error from {request.remote_addr}: {err.messages}",
                    extra={
                        "endpoint": request.endpoint,
                        "method": request.method,
                        "ip": request.remote_addr,
                        "validation_errors": err.messages
                    }
                )
                return empty(400)

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def log_api_request(include_response_time: bool = True):
    """Decorator for API request logging.

    Args:
        include_response_time: Whether to log response time

    Returns:
        Decorated function with request/response logging
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            start_time = time.time()

            logger.debug(
                f"API Request: {request.method} {request.full_path}",
                extra={
                    "method": request.method,
                    "path": request.path,
                    "endpoint": request.endpoint,
                    "ip": request.remote_addr,
                }
            )

            response = f(*args, **kwargs)

            if include_response_time:
                duration = time.time() - start_time
                status = response[1] if isinstance(response, tuple) else getattr(response, "status_code", 200)
                logger.info(f"API Response: {request.method} {request.path} {status} - {duration:.3f}s")

            return response

        return decorated_function
    return decorator


def handle_store_errors():
    """Decorator turning unexpected database failures into an empty 500."""
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Store error on {request.method} {request.path}: {e}")
                return empty(500)

        return decorated_function
    return decorator
