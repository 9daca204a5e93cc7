"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate


def _not_blank(value: str) -> None:
    if not value.strip():
        raise ValidationError("Display name is required.")


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    # Password rules are enforced by the credential store so every broken
    # rule is reported at once.
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    display_name = fields.String(
        required=True,
        data_key="displayName",
        validate=[_not_blank, validate.Length(max=100)],
    )


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload for exchanging a refresh token."""

    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1, max=512)
    )


class UserSchema(Schema):
    """Public representation of the authenticated user."""

    id = fields.String(required=True)
    email = fields.String(required=True)
    display_name = fields.String(required=True, data_key="displayName")
    roles = fields.List(fields.String(), required=True)


class AuthResponseSchema(Schema):
    """Response payload for register, login and refresh."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    user = fields.Nested(UserSchema, required=True)
