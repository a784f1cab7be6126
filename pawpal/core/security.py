# pawpal/core/security.py
from functools import wraps
from typing import Dict

from flask import jsonify
from flask_jwt_extended import create_access_token, create_refresh_token, get_jwt, verify_jwt_in_request

from pawpal.core.errors import EmailNotVerified

EMAIL_VERIFIED_CLAIM = 'email_verified'


def issue_tokens(uid: str, email_verified: bool) -> Dict[str, str]:
    """세션 토큰 쌍을 발급합니다. 이메일 인증 여부는 access 토큰 클레임으로 전달됩니다."""
    claims = {EMAIL_VERIFIED_CLAIM: bool(email_verified)}
    return {
        "access_token": create_access_token(identity=uid, additional_claims=claims),
        "refresh_token": create_refresh_token(identity=uid, additional_claims=claims),
    }


def verified_user_required(fn):
    """
    jwt_required 에 더해 이메일 인증이 끝난 세션만 허용합니다.
    인증되지 않은 세션은 403 EMAIL_NOT_VERIFIED 로 거부합니다.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if not get_jwt().get(EMAIL_VERIFIED_CLAIM, False):
            error = EmailNotVerified()
            return jsonify(error.to_dict()), error.status_code
        return fn(*args, **kwargs)
    return wrapper
