"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields

from sucat.models.user import UserRole


class UserSchema(Schema):
    """Public representation of a user entity (never the password hash)."""

    class Meta:
        ordered = True

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    name = fields.String(allow_none=True)
    nickname = fields.String(allow_none=True)
    department = fields.String(allow_none=True)
    role = fields.Enum(UserRole, by_value=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
