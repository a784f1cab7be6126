# pawpal/api/users/schemas.py
from marshmallow import Schema, fields, validate


class UserSummarySchema(Schema):
    """
    다른 사용자에게 보여주는 프로필 요약.
    phone_number 는 본인 또는 수락된 팔로워에게만 포함됩니다.
    """
    uid = fields.Str(required=True, dump_only=True)
    display_name = fields.Str()
    username = fields.Str()
    photo_url = fields.Str(allow_none=True)
    phone_number = fields.Str(allow_none=True)
    follow_status = fields.Str()


class ProfileUpdateSchema(Schema):
    """PATCH /api/users/me 부분 수정 스키마"""
    display_name = fields.Str(validate=validate.Length(min=1, max=50))
    username = fields.Str(validate=validate.Length(min=1, max=30))
    phone_number = fields.Str(validate=validate.Length(max=30))


class ProfileImageSchema(Schema):
    file_path = fields.Str(required=True, error_messages={"required": "'file_path' 필드가 필요합니다."})


class UserListQuerySchema(Schema):
    limit = fields.Int(load_default=20, validate=validate.Range(min=1, max=100))
    cursor = fields.Str(load_default=None)


class UserSearchQuerySchema(Schema):
    email = fields.Email(required=True)
