# pawpal/api/assistant/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from pawpal.core.errors import PawPalError, ServiceError
from pawpal.core.security import verified_user_required
from pawpal.services.content_service import CHAT_FALLBACK_REPLY
from .schemas import CreateSessionSchema, AskSchema, AIChatSessionResponseSchema, AIChatMessageResponseSchema

assistant_bp = Blueprint('assistant_bp', __name__)

SESSION_NOT_FOUND = {"error_code": "AI_CHAT_NOT_FOUND", "message": "AI 대화방을 찾을 수 없습니다."}


@assistant_bp.route('/sessions', methods=['GET'])
@verified_user_required
def list_sessions():
    """내 AI 대화방 목록 (최근 대화 순)."""
    assistant_service = current_app.services['assistant']
    try:
        sessions = assistant_service.list_sessions(get_jwt_identity())
        return jsonify({"sessions": AIChatSessionResponseSchema(many=True).dump(sessions)}), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"AI 대화방 목록 조회 오류: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "AI 대화방 목록 조회 중 오류가 발생했습니다."}), 500


@assistant_bp.route('/sessions', methods=['POST'])
@verified_user_required
def create_session():
    assistant_service = current_app.services['assistant']
    try:
        data = CreateSessionSchema().load(request.get_json() or {})
        session = assistant_service.create_session(get_jwt_identity(), data['title'])
        return jsonify(AIChatSessionResponseSchema().dump(session)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"AI 대화방 생성 오류: {e}", exc_info=True)
        return jsonify({"error_code": "CREATE_FAILED", "message": "AI 대화방 생성 중 오류가 발생했습니다."}), 500


@assistant_bp.route('/sessions/<string:session_id>/messages', methods=['GET'])
@verified_user_required
def list_messages(session_id: str):
    """대화방 메시지 목록 (시간 오름차순)."""
    assistant_service = current_app.services['assistant']
    try:
        messages = assistant_service.list_messages(get_jwt_identity(), session_id)
        if messages is None:
            return jsonify(SESSION_NOT_FOUND), 404
        return jsonify({"messages": AIChatMessageResponseSchema(many=True).dump(messages)}), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"AI 메시지 조회 오류 (session_id: {session_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "메시지 조회 중 오류가 발생했습니다."}), 500


@assistant_bp.route('/sessions/<string:session_id>/messages', methods=['POST'])
@verified_user_required
def ask(session_id: str):
    """질문을 보내고 응답을 받습니다. 질문과 응답 모두 대화방에 저장됩니다."""
    assistant_service = current_app.services['assistant']
    try:
        data = AskSchema().load(request.get_json() or {})
        reply = assistant_service.ask(get_jwt_identity(), session_id, data['message'])
        if reply is None:
            return jsonify(SESSION_NOT_FOUND), 404
        return jsonify({"reply": reply}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ServiceError as e:
        logging.error(f"AI 응답 생성 실패 (session_id: {session_id}): {e.message}")
        return jsonify({"reply": CHAT_FALLBACK_REPLY}), 500
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"AI 질문 처리 오류 (session_id: {session_id}): {e}", exc_info=True)
        return jsonify({"reply": CHAT_FALLBACK_REPLY}), 500
