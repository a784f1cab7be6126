# pawpal/api/follows/schemas.py
from marshmallow import Schema, fields, validate

from pawpal.models.follow import FollowAction


class FollowRequestSchema(Schema):
    """POST /api/follows/requests"""
    following_id = fields.Str(required=True, validate=validate.Length(min=1))


class ResolveRequestSchema(Schema):
    """POST /api/follows/requests/<edge_id>/resolve"""
    notification_id = fields.Str(required=True, validate=validate.Length(min=1))
    action = fields.Str(required=True, validate=validate.OneOf([a.value for a in FollowAction]))


class FollowStatusResponseSchema(Schema):
    target_id = fields.Str()
    status = fields.Str()
    can_see_private = fields.Bool()
