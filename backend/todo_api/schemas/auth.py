"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .user import EMAIL_MAX_LENGTH, NAME_LENGTH, PASSWORD_RULE


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=EMAIL_MAX_LENGTH))
    name = fields.String(required=True, validate=NAME_LENGTH)
    password = fields.String(required=True, validate=PASSWORD_RULE)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=EMAIL_MAX_LENGTH))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload for rotating a refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class LoginUserSchema(Schema):
    """Minimal identity returned with a successful login."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)


class LoginResponseSchema(TokenPairSchema):
    """Token pair plus the authenticated user."""

    user = fields.Nested(LoginUserSchema, required=True)
