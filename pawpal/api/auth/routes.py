# pawpal/api/auth/routes.py

import logging
import jwt
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from marshmallow import ValidationError

from pawpal.core.errors import PawPalError
from pawpal.core.security import EMAIL_VERIFIED_CLAIM, issue_tokens
from .schemas import (
    RegisterSchema,
    LoginSchema,
    SocialLoginSchema,
    LogoutRequestSchema,
    ResendVerificationSchema,
    SessionUserSchema
)

auth_bp = Blueprint('auth_bp', __name__)


def _session_response(user, account, status_code=200, **extra):
    body = issue_tokens(user.uid, account.email_verified)
    body.update({
        "user": SessionUserSchema().dump(user),
        "email_verified": account.email_verified,
        **extra
    })
    # 인증 메일 재발송에는 제공자 ID 토큰이 필요하므로 미인증 세션에만 함께 돌려줍니다.
    if not account.email_verified:
        body["id_token"] = account.id_token
    return jsonify(body), status_code


@auth_bp.route('/register', methods=['POST'])
def register():
    """이메일/비밀번호 회원가입. 가입 직후 인증 메일이 발송됩니다."""
    auth_service = current_app.services['auth']
    try:
        data = RegisterSchema().load(request.get_json() or {})
        user, account = auth_service.register_with_credentials(
            data['email'], data['password'], data['display_name'], data['username']
        )
        return _session_response(user, account, 201, is_new_user=True)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"회원가입 중 예외 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


@auth_bp.route('/login', methods=['POST'])
def login():
    """이메일 또는 사용자 이름 + 비밀번호 로그인."""
    auth_service = current_app.services['auth']
    try:
        data = LoginSchema().load(request.get_json() or {})
        user, account = auth_service.login_with_identifier(data['identifier'], data['password'])
        return _session_response(user, account)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"로그인 중 예외 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


@auth_bp.route('/social', methods=['POST'])
def social_login():
    """소셜 로그인 및 회원가입을 처리하는 엔드포인트입니다."""
    auth_service = current_app.services['auth']
    try:
        data = SocialLoginSchema().load(request.get_json() or {})
        user, account, is_new_user = auth_service.login_with_provider(data['provider'], data['id_token'])
        return _session_response(user, account, is_new_user=is_new_user)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"소셜 로그인 중 예외 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500


# --- 토큰 재발급 엔드포인트 ---
@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """유효한 Refresh Token으로 새로운 Access Token을 발급합니다. 이메일 인증 여부는 다시 확인합니다."""
    auth_service = current_app.services['auth']
    current_user_id = get_jwt_identity()
    try:
        email_verified = auth_service.is_email_verified(current_user_id)
    except PawPalError as e:
        logging.warning(f"이메일 인증 상태 확인 실패, 기존 클레임을 사용합니다 (uid: {current_user_id}): {e.message}")
        email_verified = get_jwt().get(EMAIL_VERIFIED_CLAIM, False)
    tokens = issue_tokens(current_user_id, email_verified)
    return jsonify(access_token=tokens["access_token"], email_verified=email_verified), 200


# --- 로그아웃 엔드포인트 ---
@auth_bp.route('/logout', methods=['POST'])
def logout():
    """로그아웃. 전달받은 Access/Refresh 토큰을 무효화 목록에 추가합니다."""
    auth_service = current_app.services['auth']
    try:
        data = LogoutRequestSchema().load(request.get_json() or {})

        secret_key = current_app.config['JWT_SECRET_KEY']
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')

        # 만료된 토큰도 무효화할 수 있도록 만료 검사는 생략합니다.
        decoded_access = jwt.decode(data['access_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
        decoded_refresh = jwt.decode(data['refresh_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})

        auth_service.logout_user(decoded_access['jti'], decoded_access['exp'],
                                 decoded_refresh['jti'], decoded_refresh['exp'])
        return jsonify({"message": "로그아웃 되었습니다."}), 200

    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400
    except jwt.PyJWTError as e:
        logging.error(f"JWT 해독 오류 발생: {e}")
        return jsonify({"error_code": "INVALID_TOKEN", "message": "유효하지 않은 토큰입니다."}), 422
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"로그아웃 처리 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "LOGOUT_FAILED", "message": "로그아웃 처리 중 오류가 발생했습니다."}), 500


@auth_bp.route('/verification/resend', methods=['POST'])
def resend_verification():
    """인증 메일 재발송. 세션 토큰이 없으면 아무 것도 하지 않고 sent=false 를 반환합니다."""
    auth_service = current_app.services['auth']
    try:
        data = ResendVerificationSchema().load(request.get_json(silent=True) or {})
        sent = auth_service.resend_verification(data.get('id_token'))
        return jsonify({"sent": sent}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"인증 메일 재발송 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부 오류가 발생했습니다."}), 500
