# pawpal/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Any, Dict, Optional
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정 / 예외
from pawpal.core.config import config_by_name
from pawpal.core.errors import PawPalError

# - API 블루프린트
from pawpal.api.auth.routes import auth_bp
from pawpal.api.users.routes import users_bp
from pawpal.api.follows.routes import follows_bp
from pawpal.api.pets.routes import pets_bp
from pawpal.api.chats.routes import chats_bp
from pawpal.api.assistant.routes import assistant_bp
from pawpal.api.posts.routes import posts_bp
from pawpal.api.notifications.routes import notifications_bp
from pawpal.api.uploads.routes import uploads_bp
from pawpal.api.relay.routes import relay_bp

# - 서비스 모듈
from pawpal.services.document_store import DocumentStore
from pawpal.services.notification_service import NotificationService
from pawpal.services.content_service import ContentService
from pawpal.services.storage_service import StorageService
from pawpal.services.identity_provider import FirebaseIdentityProvider
from pawpal.services.push_service import PushService
from pawpal.services.qr_service import QRService
from pawpal.api.auth.services import AuthService
from pawpal.api.follows.services import FollowService
from pawpal.api.users.services import UserService
from pawpal.api.pets.services import PetService
from pawpal.api.chats.services import ChatService
from pawpal.api.assistant.services import AssistantChatService
from pawpal.api.posts.services import PostService


def _init_firebase(app: Flask):
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred, {
        'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
    })


def create_app(config_name: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param overrides: 미리 생성한 서비스 인스턴스 ('store', 'content', 'storage', 'identity', 'push', 'qr').
                      'store' 가 주어지면 Firebase Admin 초기화를 건너뜁니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')
    overrides = overrides or {}

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    jwt = JWTManager(app)

    if 'store' not in overrides:
        _init_firebase(app)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}
    timeout = app.config['REQUEST_TIMEOUT_SECONDS']

    # 5-1. 다른 서비스의 기반이 되는 공용 서비스
    store = overrides['store'] if 'store' in overrides else DocumentStore(timeout=timeout)
    app.services['store'] = store

    try:
        storage_instance = overrides['storage'] if 'storage' in overrides else StorageService()
        storage_instance.init_app(app)
        app.services['storage'] = storage_instance
        logging.info("Storage service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize storage service: {e}")
        raise

    try:
        content_instance = overrides['content'] if 'content' in overrides else ContentService()
        content_instance.init_app(app)
        app.services['content'] = content_instance
        logging.info("Content service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize content service: {e}")
        raise

    identity = overrides['identity'] if 'identity' in overrides else FirebaseIdentityProvider()
    identity.init_app(app)
    app.services['identity'] = identity

    app.services['notifications'] = NotificationService(store, feed_limit=app.config['NOTIFICATION_FEED_LIMIT'])
    app.services['push'] = overrides['push'] if 'push' in overrides else PushService(store)
    app.services['qr'] = overrides['qr'] if 'qr' in overrides else QRService()

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스
    app.services['auth'] = AuthService(store, identity)
    app.services['follows'] = FollowService(store, app.services['notifications'])
    app.services['users'] = UserService(
        store,
        auth_service=app.services['auth'],
        follow_service=app.services['follows'],
        storage_service=app.services['storage'],
        identity=identity
    )
    app.services['pets'] = PetService(
        store,
        notification_service=app.services['notifications'],
        follow_service=app.services['follows'],
        content_service=app.services['content'],
        storage_service=app.services['storage'],
        qr_service=app.services['qr']
    )
    app.services['chats'] = ChatService(store, app.services['auth'], app.services['follows'])
    app.services['assistant'] = AssistantChatService(store, app.services['content'])
    app.services['posts'] = PostService(
        store,
        auth_service=app.services['auth'],
        pet_service=app.services['pets'],
        notification_service=app.services['notifications']
    )

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload: dict) -> bool:
        return app.services['auth'].is_token_revoked(jwt_payload)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(follows_bp, url_prefix='/api/follows')
    app.register_blueprint(pets_bp, url_prefix='/api/pets')
    app.register_blueprint(chats_bp, url_prefix='/api/chats')
    app.register_blueprint(assistant_bp, url_prefix='/api/assistant')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')
    # AI 채팅 / 디바이스 등록 / 푸시 발송 릴레이: /api/chat, /api/register-device, /api/send-notification
    app.register_blueprint(relay_bp, url_prefix='/api')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(PawPalError)
    def handle_domain_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(PermissionError)
    def handle_permission_error(err):
        return jsonify({"error_code": "FORBIDDEN", "message": str(err)}), 403

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 라우팅 404/405 등 HTTP 예외는 그대로 응답
        if isinstance(err, HTTPException):
            return err
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
