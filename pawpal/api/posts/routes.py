# pawpal/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from pawpal.core.errors import PawPalError
from pawpal.core.security import verified_user_required
from .schemas import PostCreateSchema, FeedQuerySchema, CommentCreateSchema, PostResponseSchema, CommentResponseSchema

posts_bp = Blueprint('posts_bp', __name__)

POST_NOT_FOUND = {"error_code": "POST_NOT_FOUND", "message": "게시글을 찾을 수 없습니다."}


@posts_bp.route('/', methods=['POST'])
@verified_user_required
def create_post():
    """새 게시글 작성."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.get_json() or {})
        post = post_service.create_post(user_id, data['content'], data['pet_id'], data['image'])
        if not post:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        return jsonify(PostResponseSchema().dump(post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"게시글 작성 API 오류 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": "게시글 작성 중 오류가 발생했습니다."}), 500


@posts_bp.route('/', methods=['GET'])
@verified_user_required
def get_feed():
    """커뮤니티 피드 (최신순, 커서 기반)."""
    post_service = current_app.services['posts']
    try:
        params = FeedQuerySchema().load(request.args)
        posts, next_cursor = post_service.list_feed(params['limit'], params['cursor'])
        return jsonify({"posts": PostResponseSchema(many=True).dump(posts), "next_cursor": next_cursor}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"피드 조회 API 오류: {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "피드 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/<string:post_id>', methods=['GET'])
@verified_user_required
def get_post(post_id: str):
    post_service = current_app.services['posts']
    try:
        post = post_service.get_post(post_id)
        if not post:
            return jsonify(POST_NOT_FOUND), 404
        return jsonify(PostResponseSchema().dump(post)), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"게시글 조회 API 오류 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "게시글 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/<string:post_id>/comments', methods=['GET'])
@verified_user_required
def list_comments(post_id: str):
    post_service = current_app.services['posts']
    try:
        comments = post_service.list_comments(post_id)
        return jsonify({"comments": CommentResponseSchema(many=True).dump(comments)}), 200
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"댓글 조회 API 오류 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "댓글 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/<string:post_id>/comments', methods=['POST'])
@verified_user_required
def add_comment(post_id: str):
    """댓글 작성. 게시글의 댓글 수가 함께 증가합니다."""
    post_service = current_app.services['posts']
    try:
        data = CommentCreateSchema().load(request.get_json() or {})
        comment = post_service.add_comment(post_id, get_jwt_identity(), data['text'])
        if not comment:
            return jsonify(POST_NOT_FOUND), 404
        return jsonify(CommentResponseSchema().dump(comment)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PawPalError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logging.error(f"댓글 작성 API 오류 (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_FAILED", "message": "댓글 작성 중 오류가 발생했습니다."}), 500
