# pawpal/api/notifications/schemas.py
from marshmallow import Schema, fields, validate


class NotificationQuerySchema(Schema):
    limit = fields.Int(load_default=None, validate=validate.Range(min=1, max=100))


class NotificationResponseSchema(Schema):
    id = fields.Str()
    title = fields.Str()
    message = fields.Str()
    type = fields.Method('get_type')
    read = fields.Bool()
    timestamp = fields.DateTime(allow_none=True)
    related_id = fields.Str(allow_none=True)
    from_user_id = fields.Str(allow_none=True)
    from_user_name = fields.Str(allow_none=True)

    def get_type(self, notification):
        return notification.type.value
