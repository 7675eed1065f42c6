from marshmallow import Schema, fields, pre_load, validates, ValidationError

from models.schemas.common import normalize_email

MIN_PASSWORD_LENGTH = 6


class UserCreateSchema(Schema):
    email = fields.Email(required=True, error_messages={"invalid": "Invalid email format"})
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = normalize_email(data["email"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class UserLoginSchema(Schema):
    email = fields.Email(required=True, error_messages={"invalid": "Invalid email format"})
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = normalize_email(data["email"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if not value:
            raise ValidationError("Password is required")

