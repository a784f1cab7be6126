# pawpal/api/chats/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from pawpal.core.errors import PawPalError
from pawpal.core.security import verified_user_required
from .schemas import OpenSessionSchema, SendMessageSchema, ChatSessionResponseSchema, ChatMessageResponseSchema

chats_bp = Blueprint('chats_bp', __name__)

CHAT_NOT_FOUND = {"error_code": "CHAT_NOT_FOUND", "message": "대화방을 찾을 수 없습니다."}


@chats_bp.route('/', methods=['GET'])
@verified_user_required
def list_sessions():
    """내 대화방 목록 (최근 대화 순)."""
    chat_service = current_app.services['chats']
    try:
        sessions = chat_service.list_sessions(get_jwt_identity())
        return jsonify({"chats": ChatSessionResponseSchema(many=True).dump(sessions)}), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"대화방 목록 조회 오류: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "대화방 목록 조회 중 오류가 발생했습니다."}), 500


@chats_bp.route('/', methods=['POST'])
@verified_user_required
def open_session():
    """상대방과의 대화방을 열거나(없으면 생성) 기존 대화방을 반환합니다."""
    chat_service = current_app.services['chats']
    auth_service = current_app.services['auth']
    try:
        data = OpenSessionSchema().load(request.get_json() or {})
        if not auth_service.get_user(data['other_user_id']):
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        session = chat_service.open_session(get_jwt_identity(), data['other_user_id'])
        return jsonify(ChatSessionResponseSchema().dump(session)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"대화방 열기 오류: {e}", exc_info=True)
        return jsonify({"error_code": "CHAT_OPEN_FAILED", "message": "대화방을 여는 중 오류가 발생했습니다."}), 500


@chats_bp.route('/<string:chat_id>/messages', methods=['GET'])
@verified_user_required
def list_messages(chat_id: str):
    """대화방 메시지 목록 (시간 오름차순)."""
    chat_service = current_app.services['chats']
    try:
        messages = chat_service.list_messages(chat_id, get_jwt_identity())
        if messages is None:
            return jsonify(CHAT_NOT_FOUND), 404
        return jsonify({"messages": ChatMessageResponseSchema(many=True).dump(messages)}), 200
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"메시지 목록 조회 오류 (chat_id: {chat_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "메시지 조회 중 오류가 발생했습니다."}), 500


@chats_bp.route('/<string:chat_id>/messages', methods=['POST'])
@verified_user_required
def send_message(chat_id: str):
    """메시지 전송."""
    chat_service = current_app.services['chats']
    try:
        data = SendMessageSchema().load(request.get_json() or {})
        message = chat_service.send_message(chat_id, get_jwt_identity(), data['text'])
        if message is None:
            return jsonify(CHAT_NOT_FOUND), 404
        return jsonify(ChatMessageResponseSchema().dump(message)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"메시지 전송 오류 (chat_id: {chat_id}): {e}", exc_info=True)
        return jsonify({"error_code": "SEND_FAILED", "message": "메시지 전송 중 오류가 발생했습니다."}), 500
