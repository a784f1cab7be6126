# pawpal/api/notifications/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from pawpal.core.errors import PawPalError
from pawpal.core.security import verified_user_required
from .schemas import NotificationQuerySchema, NotificationResponseSchema

notifications_bp = Blueprint('notifications_bp', __name__)


@notifications_bp.route('/', methods=['GET'])
@verified_user_required
def list_notifications():
    """내 알림 목록 (최신순)."""
    notification_service = current_app.services['notifications']
    try:
        params = NotificationQuerySchema().load(request.args)
        notifications = notification_service.list_for_user(get_jwt_identity(), params['limit'])
        return jsonify({"notifications": NotificationResponseSchema(many=True).dump(notifications)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"알림 목록 조회 오류: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "알림 조회 중 오류가 발생했습니다."}), 500


@notifications_bp.route('/<string:notification_id>/read', methods=['PATCH'])
@verified_user_required
def mark_as_read(notification_id: str):
    notification_service = current_app.services['notifications']
    try:
        notification = notification_service.mark_as_read(notification_id, get_jwt_identity())
        if not notification:
            return jsonify({"error_code": "NOTIFICATION_NOT_FOUND", "message": "알림을 찾을 수 없습니다."}), 404
        return jsonify(NotificationResponseSchema().dump(notification)), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"알림 읽음 처리 오류 (id: {notification_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "message": "알림 읽음 처리 중 오류가 발생했습니다."}), 500
