from marshmallow import Schema, fields, validate

from models.schemas.common import validate_not_blank, validate_status


class TaskCreateSchema(Schema):
    title = fields.String(
        required=True,
        validate=[validate_not_blank("Title is required"), validate.Length(max=255)],
        error_messages={"required": "Title is required"},
    )
    description = fields.String(allow_none=True)


class TaskUpdateSchema(Schema):
    # All optional, but validate if present
    title = fields.String(validate=[validate_not_blank("Title cannot be empty"), validate.Length(max=255)])
    description = fields.String(allow_none=True)
    status = fields.String(validate=validate_status)


class TaskOutSchema(Schema):
    id = fields.Integer()
    title = fields.String()
    description = fields.String(allow_none=True)
    status = fields.String()
    user_id = fields.Integer()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
