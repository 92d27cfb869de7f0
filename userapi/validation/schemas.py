"""Validation schemas for API requests using Marshmallow."""

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from userapi.domain.models import User


class UserSchema(Schema):
    """Schema for validating user create and update bodies.

    Unknown keys are dropped and a client-supplied ``id`` is ignored; ids are
    always assigned by the store.
    """

    class Meta:
        unknown = EXCLUDE

    id = fields.Int(dump_only=True)

    name = fields.Str(
        required=True,
        validate=[
            validate.Length(min=1, max=255),
            validate.Regexp(r'\s*\S', error='Name must not be blank'),
        ],
        error_messages={'required': 'Name is required'}
    )

    email = fields.Email(
        required=True,
        validate=validate.Length(max=255),
        error_messages={'required': 'Email is required'}
    )

    @post_load
    def make_user(self, data, **kwargs) -> User:
        return User(id=None, name=data['name'], email=data['email'])


user_schema = UserSchema()
