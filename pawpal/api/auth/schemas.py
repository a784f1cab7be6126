# pawpal/api/auth/schemas.py
from marshmallow import Schema, fields, validate

from pawpal.services.identity_provider import PROVIDER_KINDS


class RegisterSchema(Schema):
    """이메일/비밀번호 회원가입 요청 스키마"""
    email = fields.Email(required=True)
    # 길이 검사는 WeakPassword 로 응답하도록 서비스 계층에서 수행합니다.
    password = fields.Str(required=True, load_only=True)
    display_name = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    username = fields.Str(required=True, validate=validate.Length(min=1, max=30))


class LoginSchema(Schema):
    """로그인 요청 스키마. identifier 는 이메일 또는 사용자 이름입니다."""
    identifier = fields.Str(required=True, validate=validate.Length(min=1))
    password = fields.Str(required=True, load_only=True)


class SocialLoginSchema(Schema):
    """소셜 로그인 요청의 유효성을 검사하는 스키마"""
    provider = fields.Str(
        required=True,
        validate=validate.OneOf(list(PROVIDER_KINDS)),
        metadata={"description": "소셜 로그인 제공자 (google, apple)"}
    )
    id_token = fields.Str(
        required=True,
        metadata={"description": "제공자 로그인 후 클라이언트가 받은 Firebase ID 토큰"}
    )


class LogoutRequestSchema(Schema):
    """로그아웃 요청의 유효성을 검사하는 스키마"""
    access_token = fields.Str(required=True)
    refresh_token = fields.Str(required=True)


class ResendVerificationSchema(Schema):
    id_token = fields.Str(required=False, allow_none=True)


class SessionUserSchema(Schema):
    """로그인/가입 응답에 포함되는 본인 정보"""
    uid = fields.Str()
    email = fields.Str(allow_none=True)
    display_name = fields.Str()
    username = fields.Str()
    photo_url = fields.Str(allow_none=True)
    phone_number = fields.Str(allow_none=True)
