# pawpal/services/storage_service.py
import uuid
import logging
from datetime import timedelta
from flask import Flask
from firebase_admin import storage

# 업로드 목적별 저장 폴더
UPLOAD_PATHS = {
    "user_profile": "user_profiles/{user_id}",
    "post_image": "posts/{user_id}",
    "pet_avatar_reference": "pet_avatar_references/{user_id}",
}


class StorageService:
    """
    Firebase Storage 관련 로직을 담당하는 서비스 클래스입니다.
    업로드용 Pre-signed URL 발급, 업로드된 파일의 공개 URL 전환, 생성된 이미지 저장을 제공합니다.
    """

    def __init__(self, bucket=None):
        self.bucket = bucket

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        if self.bucket is not None:
            return
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _ensure_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

    def generate_upload_url(self, user_id: str, upload_type: str, filename: str, content_type: str) -> dict:
        """
        업로드 목적에 맞는 경로로 직접 업로드(PUT)할 수 있는 Pre-signed URL 을 생성합니다.

        :param user_id: JWT에서 추출한 현재 로그인된 사용자의 고유 ID
        :param upload_type: 업로드 목적 ("user_profile", "post_image", "pet_avatar_reference")
        :param filename: 원본 파일명 (확장자 파악에 사용)
        :param content_type: 업로드할 파일의 MIME 타입 (예: "image/jpeg")
        :return: 업로드 URL과 서버에서 사용할 파일 경로가 담긴 딕셔너리
        """
        self._ensure_bucket()

        folder_template = UPLOAD_PATHS.get(upload_type)
        if not folder_template:
            raise ValueError(f"'{upload_type}'은(는) 유효한 업로드 타입이 아닙니다.")

        extension = filename.split('.')[-1] if '.' in filename else ''
        destination_blob_name = f"{folder_template.format(user_id=user_id)}/{uuid.uuid4()}.{extension}"

        blob = self.bucket.blob(destination_blob_name)
        # 15분 동안 유효한 업로드 전용 URL
        upload_url = blob.generate_signed_url(
            version="v4",
            expiration=timedelta(minutes=15),
            method="PUT",
            content_type=content_type
        )

        return {
            "upload_url": upload_url,
            "file_path": destination_blob_name
        }

    def make_public_and_get_url(self, file_path: str) -> str:
        """
        지정된 파일을 공개(public)로 설정하고 해당 URL을 반환합니다.

        :param file_path: 공개로 전환할 파일의 경로
        :return: 공개적으로 접근 가능한 URL
        """
        self._ensure_bucket()
        blob = self.bucket.blob(file_path)
        if not blob.exists():
            raise FileNotFoundError(f"파일을 찾을 수 없습니다: {file_path}")

        try:
            blob.make_public()
            return blob.public_url
        except Exception as e:
            logging.error(f"파일 공개 전환 실패: {e}", exc_info=True)
            raise

    def download_bytes(self, file_path: str) -> bytes:
        """업로드된 파일(참고 이미지, QR 이미지 등)의 내용을 읽어옵니다."""
        self._ensure_bucket()
        blob = self.bucket.blob(file_path)
        if not blob.exists():
            raise FileNotFoundError(f"파일을 찾을 수 없습니다: {file_path}")
        return blob.download_as_bytes()

    def upload_bytes(self, file_path: str, data: bytes, content_type: str = "image/png") -> str:
        """서버에서 생성한 바이트(아바타 등)를 저장하고 공개 URL 을 반환합니다."""
        self._ensure_bucket()
        blob = self.bucket.blob(file_path)
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        logging.info(f"StorageService: 파일 업로드 완료 ({file_path})")
        return blob.public_url
