# pawpal/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from pawpal.core.errors import PawPalError
from pawpal.core.security import verified_user_required
from .schemas import (
    UserSummarySchema,
    ProfileUpdateSchema,
    ProfileImageSchema,
    UserListQuerySchema,
    UserSearchQuerySchema
)

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/', methods=['GET'])
@verified_user_required
def list_users():
    """사용자 목록 (문서 ID 커서 기반 페이지네이션)."""
    user_service = current_app.services['users']
    try:
        params = UserListQuerySchema().load(request.args)
        users, next_cursor = user_service.list_users(get_jwt_identity(), params['limit'], params['cursor'])
        return jsonify({"users": UserSummarySchema(many=True).dump(users), "next_cursor": next_cursor}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"사용자 목록 조회 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "USER_LIST_FAILED", "message": "사용자 목록 조회 중 오류가 발생했습니다."}), 500


@users_bp.route('/search', methods=['GET'])
@verified_user_required
def search_users():
    """이메일로 사용자 검색 (본인 제외)."""
    user_service = current_app.services['users']
    try:
        params = UserSearchQuerySchema().load(request.args)
        users = user_service.search_by_email(params['email'], get_jwt_identity())
        return jsonify({"users": UserSummarySchema(many=True).dump(users)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"사용자 검색 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "USER_SEARCH_FAILED", "message": "사용자 검색 중 오류가 발생했습니다."}), 500


@users_bp.route('/by-username/<string:username>', methods=['GET'])
@verified_user_required
def get_user_by_username(username: str):
    """사용자 이름으로 프로필을 조회합니다."""
    user_service = current_app.services['users']
    try:
        profile = user_service.get_profile_by_username(username, get_jwt_identity())
        if not profile:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        return jsonify(UserSummarySchema().dump(profile)), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"사용자 프로필 조회 중 오류 발생 (username: {username}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_FETCH_FAILED", "message": "프로필 조회 중 오류가 발생했습니다."}), 500


@users_bp.route('/<string:user_id>', methods=['GET'])
@verified_user_required
def get_user_profile(user_id: str):
    """특정 사용자의 프로필 요약을 조회합니다."""
    user_service = current_app.services['users']
    try:
        profile = user_service.get_profile(user_id, get_jwt_identity())
        if not profile:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        return jsonify(UserSummarySchema().dump(profile)), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"사용자 프로필 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_FETCH_FAILED", "message": "프로필 조회 중 오류가 발생했습니다."}), 500


@users_bp.route('/me', methods=['PATCH'])
@verified_user_required
def update_my_profile():
    """현재 로그인된 사용자의 프로필(표시 이름, 사용자 이름, 전화번호)을 수정합니다."""
    user_service = current_app.services['users']
    user_id = get_jwt_identity()
    try:
        data = ProfileUpdateSchema().load(request.get_json() or {})
        updated_user = user_service.update_profile(user_id, **data)
        if not updated_user:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        return jsonify(UserSummarySchema().dump(updated_user.public_summary(include_private=True))), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"프로필 수정 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "프로필 수정 중 서버 오류가 발생했습니다."}), 500


@users_bp.route('/me/profile-image', methods=['PATCH'])
@verified_user_required
def update_my_profile_image():
    """업로드된 이미지로 현재 사용자의 프로필 사진을 변경합니다."""
    user_service = current_app.services['users']
    user_id = get_jwt_identity()
    try:
        data = ProfileImageSchema().load(request.get_json() or {})
        updated_user = user_service.update_profile_image(user_id, data['file_path'])
        if not updated_user:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        return jsonify(UserSummarySchema().dump(updated_user.public_summary(include_private=True))), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except FileNotFoundError as e:
        return jsonify({"error_code": "FILE_NOT_FOUND", "message": str(e)}), 404
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"프로필 이미지 업데이트 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "프로필 이미지 업데이트 중 서버 오류가 발생했습니다."}), 500
