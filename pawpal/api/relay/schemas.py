# pawpal/api/relay/schemas.py
from marshmallow import Schema, fields


class ChatRelaySchema(Schema):
    """POST /api/chat. history 항목은 {role, content} 또는 {role, parts: [{text}]} 형식입니다."""
    message = fields.Str(required=True)
    history = fields.List(fields.Dict(), load_default=list)


class RegisterDeviceSchema(Schema):
    token = fields.Str(required=True)
    uid = fields.Str(required=True)


class SendNotificationSchema(Schema):
    token = fields.Str(required=True)
    title = fields.Str(required=True)
    body = fields.Str(required=True)
    data = fields.Dict(keys=fields.Str(), values=fields.Raw(), load_default=None)
