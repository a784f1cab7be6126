# pawpal/api/chats/schemas.py
from marshmallow import Schema, fields, validate


class OpenSessionSchema(Schema):
    """POST /api/chats/ 대화방 열기"""
    other_user_id = fields.Str(required=True, validate=validate.Length(min=1))


class SendMessageSchema(Schema):
    text = fields.Str(required=True)


class ChatSessionResponseSchema(Schema):
    id = fields.Str()
    participants = fields.List(fields.Str())
    last_message = fields.Str()
    last_timestamp = fields.DateTime(allow_none=True)
    other_user = fields.Dict(allow_none=True)


class ChatMessageResponseSchema(Schema):
    id = fields.Str()
    sender_id = fields.Str()
    text = fields.Str()
    timestamp = fields.DateTime(allow_none=True)
