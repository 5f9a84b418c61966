"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate, validates_schema
from marshmallow.exceptions import ValidationError

EMAIL_MAX_LENGTH = 254
NAME_LENGTH = validate.Length(min=2, max=50)
PASSWORD_RULE = validate.And(
    validate.Length(min=8, max=128),
    validate.Regexp(
        r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)",
        error="Password must contain at least one uppercase letter, one lowercase letter and one number.",
    ),
)


class UserUpdateSchema(Schema):
    """Partial self-service profile update."""

    email = fields.Email(validate=validate.Length(max=EMAIL_MAX_LENGTH))
    name = fields.String(validate=NAME_LENGTH)
    password = fields.String(validate=PASSWORD_RULE)

    @validates_schema
    def _require_any(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide at least one of email, name or password.")


class UserSchema(Schema):
    """Public representation of a user entity."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
