# pawpal/api/uploads/routes.py

import logging
from flask import request, jsonify, Blueprint, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import Schema, fields, ValidationError

uploads_bp = Blueprint('uploads', __name__)


class UploadUrlRequestSchema(Schema):
    """Pre-signed URL 발급 요청 스키마"""
    upload_type = fields.Str(required=True)
    filename = fields.Str(required=True)
    content_type = fields.Str(required=True)


@uploads_bp.route('/url', methods=['POST'])
@jwt_required()
def get_upload_url():
    """
    파일 업로드용 Pre-signed URL 을 발급합니다.
    클라이언트는 받은 URL 로 Storage 에 직접 PUT 한 뒤, file_path 를 다른 API 에 전달합니다.
    """
    user_id = get_jwt_identity()
    storage_service = current_app.services['storage']
    try:
        data = UploadUrlRequestSchema().load(request.get_json() or {})
    except ValidationError as e:
        logging.warning(f"URL 발급 요청 실패 (잘못된 파라미터): {e.messages}")
        return jsonify({
            "error_code": "INVALID_PARAMETERS",
            "message": "필수 파라미터가 누락되었습니다: 'upload_type', 'filename', 'content_type'가 필요합니다.",
            "details": e.messages
        }), 400

    try:
        url_info = storage_service.generate_upload_url(user_id, data['upload_type'], data['filename'], data['content_type'])
        return jsonify(url_info), 200
    except ValueError as e:
        logging.warning(f"URL 발급 요청 실패 (잘못된 업로드 타입): {e}")
        return jsonify({"error_code": "INVALID_UPLOAD_TYPE", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"Pre-signed URL 생성 중 서버 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "URL_GENERATION_FAILED", "message": "URL 생성 중 서버 오류가 발생했습니다."}), 500
