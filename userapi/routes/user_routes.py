"""User API routes.

Maps each REST verb on ``/api/users`` to a ``UserService`` call and each
service outcome to a status code.
"""

import logging

from flask import Blueprint, g, jsonify, request

from userapi.database import with_user_service
from userapi.exceptions import DuplicateEmailError, NotFoundError
from userapi.routes.decorators import empty, handle_store_errors, log_api_request, validate_json
from userapi.services import UserService
from userapi.validation import user_schema

bp = Blueprint("users", __name__, url_prefix="/api/users")
logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "User API is running!"


@bp.route("", methods=["GET"])
@log_api_request()
@handle_store_errors()
@with_user_service
def list_users(service: UserService):
    """List all users."""
    return jsonify([user.to_dict() for user in service.list_all()])


@bp.route("/<int:user_id>", methods=["GET"])
@log_api_request()
@handle_store_errors()
@with_user_service
def get_user(service: UserService, user_id: int):
    """Get user by ID."""
    result = service.get_by_id(user_id)
    if not result.ok:
        return empty(404)
    return jsonify(result.user.to_dict())


@bp.route("", methods=["POST"])
@log_api_request()
@validate_json(user_schema)
@handle_store_errors()
@with_user_service
def create_user(service: UserService):
    """Create a user; 400 when the email is taken."""
    result = service.create(g.validated_data)
    if not result.ok:
        return empty(400)
    return jsonify(result.user.to_dict()), 201


@bp.route("/<int:user_id>", methods=["PUT"])
@log_api_request()
@validate_json(user_schema)
@handle_store_errors()
@with_user_service
def update_user(service: UserService, user_id: int):
    """Replace name and email of an existing user."""
    result = service.update(user_id, g.validated_data)
    if isinstance(result.error, NotFoundError):
        return empty(404)
    if isinstance(result.error, DuplicateEmailError):
        return empty(400)
    return jsonify(result.user.to_dict())


@bp.route("/<int:user_id>", methods=["DELETE"])
@log_api_request()
@handle_store_errors()
@with_user_service
def delete_user(service: UserService, user_id: int):
    """Delete a user."""
    result = service.delete(user_id)
    if not result.ok:
        return empty(404)
    return empty(204)


@bp.route("/search/email", methods=["GET"])
@log_api_request()
@handle_store_errors()
@with_user_service
def search_by_email(service: UserService):
    """Exact email lookup: /api/users/search/email?email=kim@test.com"""
    email = request.args.get("email")
    if email is None:
        return empty(400)
    result = service.get_by_email(email)
    if not result.ok:
        return empty(404)
    return jsonify(result.user.to_dict())


@bp.route("/search/name", methods=["GET"])
@log_api_request()
@handle_store_errors()
@with_user_service
def search_by_name(service: UserService):
    """Case-insensitive name substring search: /api/users/search/name?name=kim"""
    name = request.args.get("name")
    if name is None:
        return empty(400)
    return jsonify([user.to_dict() for user in service.search_by_name(name)])


@bp.route("/health", methods=["GET"])
def health():
    """Liveness check."""
    return HEALTH_MESSAGE, 200, {"Content-Type": "text/plain; charset=utf-8"}
