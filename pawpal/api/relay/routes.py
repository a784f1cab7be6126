# pawpal/api/relay/routes.py
"""
웹 클라이언트가 직접 호출하는 얇은 릴레이 엔드포인트 (AI 채팅, 디바이스 등록, 푸시 발송).
응답 형식은 클라이언트와 맞춰 {reply} / {success} / {error} 를 그대로 사용합니다.
"""
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from pawpal.models.chat import AssistantTurn
from pawpal.services.content_service import CHAT_FALLBACK_REPLY
from .schemas import ChatRelaySchema, RegisterDeviceSchema, SendNotificationSchema

relay_bp = Blueprint('relay_bp', __name__)


@relay_bp.route('/chat', methods=['POST'])
def chat():
    """AI 도우미 채팅. 요청이 잘못됐거나 실패하면 500 과 함께 고정 안내 문구를 reply 로 돌려줍니다."""
    content_service = current_app.services['content']
    try:
        data = ChatRelaySchema().load(request.get_json() or {})
        history = [AssistantTurn.from_payload(item) for item in data['history']]
        reply = content_service.chat(data['message'], history)
        return jsonify({"reply": reply}), 200
    except ValidationError as err:
        logging.warning(f"AI 채팅 요청 형식 오류: {err.messages}")
        return jsonify({"reply": CHAT_FALLBACK_REPLY}), 500
    except Exception as e:
        logging.error(f"API Error: {e}", exc_info=True)
        return jsonify({"reply": CHAT_FALLBACK_REPLY}), 500


@relay_bp.route('/register-device', methods=['POST'])
@jwt_required(optional=True)
def register_device():
    """FCM 디바이스 토큰 등록. 로그인 상태라면 본인 uid 로만 등록할 수 있습니다."""
    push_service = current_app.services['push']
    try:
        data = RegisterDeviceSchema().load(request.get_json() or {})
    except ValidationError:
        return jsonify({"error": "Missing token or uid"}), 400

    current_user_id = get_jwt_identity()
    if current_user_id and current_user_id != data['uid']:
        return jsonify({"error": "Forbidden"}), 403

    try:
        push_service.register_device(data['uid'], data['token'])
        return jsonify({"success": True}), 200
    except Exception as e:
        logging.error(f"Error registering device: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500


@relay_bp.route('/send-notification', methods=['POST'])
@jwt_required()
def send_notification():
    """단일 디바이스로 푸시 알림을 보냅니다. data 가 없으면 pet-alert 유형으로 보냅니다."""
    push_service = current_app.services['push']
    try:
        data = SendNotificationSchema().load(request.get_json() or {})
    except ValidationError:
        return jsonify({"error": "Missing required fields"}), 400

    try:
        message_id = push_service.send(data['token'], data['title'], data['body'], data['data'])
        return jsonify({"success": True, "messageId": message_id}), 200
    except Exception as e:
        logging.error(f"Error sending notification: {e}", exc_info=True)
        return jsonify({"error": "Failed to send notification"}), 500
