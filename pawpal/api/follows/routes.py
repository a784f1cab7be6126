# pawpal/api/follows/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from pawpal.core.errors import PawPalError
from pawpal.core.security import verified_user_required
from pawpal.models.follow import FollowAction, FollowStatus
from .schemas import FollowRequestSchema, ResolveRequestSchema, FollowStatusResponseSchema

follows_bp = Blueprint('follows_bp', __name__)


@follows_bp.route('/status/<string:target_id>', methods=['GET'])
@verified_user_required
def get_follow_status(target_id: str):
    """현재 사용자 -> target 팔로우 상태와 비공개 정보 열람 가능 여부."""
    follow_service = current_app.services['follows']
    viewer_id = get_jwt_identity()
    try:
        status = follow_service.get_status(viewer_id, target_id)
        response = {
            "target_id": target_id,
            "status": status.value,
            "can_see_private": status in (FollowStatus.IS_SELF, FollowStatus.FOLLOWING)
        }
        return jsonify(FollowStatusResponseSchema().dump(response)), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"팔로우 상태 조회 오류 (target: {target_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "팔로우 상태 조회 중 오류가 발생했습니다."}), 500


@follows_bp.route('/requests', methods=['POST'])
@verified_user_required
def request_follow():
    """팔로우 요청을 보냅니다. 대상에게 follow_request 알림이 함께 생성됩니다."""
    follow_service = current_app.services['follows']
    auth_service = current_app.services['auth']
    follower_id = get_jwt_identity()
    try:
        data = FollowRequestSchema().load(request.get_json() or {})
        follower = auth_service.get_user(follower_id)
        if not follower or not auth_service.get_user(data['following_id']):
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        edge_id = follow_service.request_follow(follower_id, follower.display_name, data['following_id'])
        return jsonify({"edge_id": edge_id, "status": FollowStatus.PENDING.value}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"팔로우 요청 API 오류: {e}", exc_info=True)
        return jsonify({"error_code": "FOLLOW_REQUEST_FAILED", "message": "팔로우 요청 중 오류가 발생했습니다."}), 500


@follows_bp.route('/requests/<string:edge_id>/resolve', methods=['POST'])
@verified_user_required
def resolve_follow_request(edge_id: str):
    """받은 팔로우 요청을 수락(accept) 또는 거절(decline)합니다."""
    follow_service = current_app.services['follows']
    user_id = get_jwt_identity()
    try:
        data = ResolveRequestSchema().load(request.get_json() or {})
        status = follow_service.resolve_request(
            data['notification_id'], edge_id, FollowAction(data['action']), actor_id=user_id
        )
        if status is None:
            return jsonify({"error_code": "REQUEST_NOT_FOUND", "message": "팔로우 요청을 찾을 수 없습니다."}), 404
        return jsonify({"edge_id": edge_id, "status": status.value}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"팔로우 요청 처리 API 오류 (edge: {edge_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FOLLOW_RESOLVE_FAILED", "message": "팔로우 요청 처리 중 오류가 발생했습니다."}), 500


@follows_bp.route('/<string:user_id>/followers', methods=['GET'])
@verified_user_required
def list_followers(user_id: str):
    follow_service = current_app.services['follows']
    try:
        return jsonify({"user_ids": follow_service.list_followers(user_id)}), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"팔로워 목록 조회 오류 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "팔로워 목록 조회 중 오류가 발생했습니다."}), 500


@follows_bp.route('/<string:user_id>/following', methods=['GET'])
@verified_user_required
def list_following(user_id: str):
    follow_service = current_app.services['follows']
    try:
        return jsonify({"user_ids": follow_service.list_following(user_id)}), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"팔로잉 목록 조회 오류 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "팔로잉 목록 조회 중 오류가 발생했습니다."}), 500
