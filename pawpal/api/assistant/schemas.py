# pawpal/api/assistant/schemas.py
from marshmallow import Schema, fields


class CreateSessionSchema(Schema):
    """POST /api/assistant/sessions"""
    title = fields.Str(load_default=None, allow_none=True)


class AskSchema(Schema):
    message = fields.Str(required=True)


class AIChatSessionResponseSchema(Schema):
    id = fields.Str()
    title = fields.Str()
    last_timestamp = fields.DateTime(allow_none=True)
    created_at = fields.DateTime(allow_none=True)


class AIChatMessageResponseSchema(Schema):
    id = fields.Str()
    role = fields.Str()
    text = fields.Str()
    timestamp = fields.DateTime(allow_none=True)
