# pawpal/core/errors.py
"""
도메인 전반에서 사용하는 예외 계층.

저수준 저장소/네트워크 오류는 각 컴포넌트 경계에서 로그를 남긴 뒤
아래 예외 중 하나로 변환되며, API 계층은 error_code / status_code 를 그대로
응답으로 사용합니다. 조회 실패(Not Found)는 예외가 아니라 None 으로 반환합니다.
"""
from typing import Any, Dict, Optional


class PawPalError(Exception):
    """모든 도메인 예외의 기반 클래스."""
    error_code = "INTERNAL_SERVER_ERROR"
    status_code = 500
    default_message = "서버 내부에서 예상치 못한 오류가 발생했습니다."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error_code": self.error_code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


# --- 입력 검증 (쓰기 전에 동기적으로 거부) ---
class DomainValidationError(PawPalError):
    error_code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "입력값이 올바르지 않습니다."


class MissingFieldError(DomainValidationError):
    error_code = "MISSING_FIELD"

    def __init__(self, field_name: str, message: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message or f"'{field_name}' 항목은 필수입니다.", details={"field": field_name})


class InvalidBirthday(DomainValidationError):
    error_code = "INVALID_BIRTHDAY"
    default_message = "생일은 미래 날짜일 수 없습니다."


class BiologicalLimitExceeded(DomainValidationError):
    error_code = "BIOLOGICAL_LIMIT_EXCEEDED"
    default_message = "생물학적으로 가능한 나이를 초과했습니다."


class InvalidWeight(DomainValidationError):
    error_code = "INVALID_WEIGHT"
    default_message = "체중은 유효한 숫자여야 합니다."


class InvalidVaccineName(DomainValidationError):
    error_code = "INVALID_VACCINE_NAME"
    default_message = "백신 이름은 필수입니다."


class InvalidRecordKind(DomainValidationError):
    error_code = "INVALID_RECORD_KIND"
    default_message = "지원하지 않는 건강 기록 종류입니다."


class IndexOutOfRange(DomainValidationError):
    error_code = "INDEX_OUT_OF_RANGE"
    default_message = "삭제하려는 기록이 존재하지 않습니다."


class WeakPassword(DomainValidationError):
    error_code = "WEAK_PASSWORD"
    default_message = "비밀번호는 6자 이상이어야 합니다."


class SelfActionError(DomainValidationError):
    error_code = "SELF_ACTION_NOT_ALLOWED"
    default_message = "자기 자신을 대상으로 할 수 없는 작업입니다."


# --- 충돌 (사전 조회 기반, 경쟁 상태는 허용) ---
class ConflictError(PawPalError):
    error_code = "CONFLICT"
    status_code = 409
    default_message = "이미 존재하는 데이터입니다."


class UsernameTaken(ConflictError):
    error_code = "USERNAME_TAKEN"
    default_message = "이미 사용 중인 사용자 이름입니다."


class EmailInUse(ConflictError):
    error_code = "EMAIL_IN_USE"
    default_message = "이미 가입된 이메일입니다."


# --- 인증 ---
class AuthenticationError(PawPalError):
    error_code = "AUTHENTICATION_FAILED"
    status_code = 401
    default_message = "인증에 실패했습니다."


class InvalidCredential(AuthenticationError):
    error_code = "INVALID_CREDENTIAL"
    default_message = "아이디 또는 비밀번호가 올바르지 않습니다."


class AccountNotFound(AuthenticationError):
    error_code = "ACCOUNT_NOT_FOUND"
    status_code = 404
    default_message = "가입된 계정을 찾을 수 없습니다."


class EmailNotVerified(AuthenticationError):
    error_code = "EMAIL_NOT_VERIFIED"
    status_code = 403
    default_message = "이메일 인증이 완료되지 않았습니다."


# --- 외부 서비스 ---
class ServiceError(PawPalError):
    error_code = "SERVICE_UNAVAILABLE"
    status_code = 502
    default_message = "외부 서비스와 통신하지 못했습니다. 잠시 후 다시 시도해주세요."


class NetworkTimeout(ServiceError):
    error_code = "NETWORK_TIMEOUT"
    status_code = 504
    default_message = "요청 시간이 초과되었습니다. 네트워크 상태를 확인해주세요."


class DocumentNotFound(PawPalError):
    """존재하지 않는 문서에 대한 쓰기(update/batch) 시도. 단순 조회 실패는 None 으로 반환합니다."""
    error_code = "NOT_FOUND"
    status_code = 404
    default_message = "대상 데이터를 찾을 수 없습니다."
