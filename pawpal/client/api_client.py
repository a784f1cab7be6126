# pawpal/client/api_client.py
"""
PawPal HTTP API 클라이언트.

모든 요청에 타임아웃을 적용하며, 서버의 {error_code, message} 응답은
pawpal.core.errors 의 같은 error_code 를 가진 예외로 복원합니다.
"""
import logging
from typing import Any, Dict, List, Optional, Type

import requests

from pawpal.core import errors
from pawpal.core.errors import PawPalError, ServiceError, NetworkTimeout


def _collect_error_classes(base: Type[PawPalError]) -> Dict[str, Type[PawPalError]]:
    registry = {base.error_code: base}
    for subclass in base.__subclasses__():
        registry.update(_collect_error_classes(subclass))
    return registry


ERROR_CLASSES = _collect_error_classes(errors.PawPalError)


class PawPalApiClient:
    """
    :param base_url: 서버 주소 (예: 'http://localhost:5000')
    :param timeout: 요청 타임아웃(초)
    :param session: 테스트용 requests.Session 주입
    """
    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None

    def _raise_for_error(self, response) -> None:
        if response.status_code < 400:
            return
        try:
            body = response.json()
        except ValueError:
            body = {}
        error_code = body.get('error_code') if isinstance(body, dict) else None
        message = body.get('message') if isinstance(body, dict) else None

        if response.status_code == 403 and error_code == 'FORBIDDEN':
            raise PermissionError(message or "권한이 없습니다.")
        error_class = ERROR_CLASSES.get(error_code)
        if error_class is None or error_class is errors.MissingFieldError:
            # MissingFieldError 는 필드명을 요구하므로 일반 검증 오류로 복원합니다.
            error_class = errors.DomainValidationError if response.status_code == 400 else ServiceError
        raise error_class(message, details=body.get('details') if isinstance(body, dict) else None)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop('headers', {})
        if self.access_token:
            headers['Authorization'] = f"Bearer {self.access_token}"
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logging.warning(f"API 요청 시간 초과 ({method} {path}): {e}")
            raise NetworkTimeout() from e
        except requests.RequestException as e:
            logging.error(f"API 요청 실패 ({method} {path}): {e}")
            raise ServiceError() from e

        self._raise_for_error(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # --- 인증 ---
    def login(self, identifier: str, password: str) -> Dict[str, Any]:
        body = self._request('POST', '/api/auth/login', json={"identifier": identifier, "password": password})
        self.access_token = body.get('access_token')
        self.refresh_token = body.get('refresh_token')
        return body

    # --- 반려동물 ---
    def list_pets(self, owner_id: str) -> List[Dict[str, Any]]:
        body = self._request('GET', f'/api/pets/owner/{owner_id}')
        return body.get('pets', [])

    def register_pet(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', '/api/pets/', json=payload)

    def update_pet(self, pet_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('PATCH', f'/api/pets/{pet_id}', json=changes)

    def purge_pet(self, pet_id: str) -> None:
        self._request('DELETE', f'/api/pets/{pet_id}')

    def add_weight(self, pet_id: str, weight: float, date: Optional[str] = None) -> Dict[str, Any]:
        return self._request('POST', f'/api/pets/{pet_id}/weights', json={"weight": weight, "date": date})

    def add_vaccination(self, pet_id: str, name: str, date: Optional[str] = None,
                        next_due_date: Optional[str] = None) -> Dict[str, Any]:
        payload = {"name": name, "date": date, "next_due_date": next_due_date}
        return self._request('POST', f'/api/pets/{pet_id}/vaccinations', json=payload)

    def delete_record(self, pet_id: str, kind: str, index: int) -> Dict[str, Any]:
        return self._request('DELETE', f'/api/pets/{pet_id}/records/{kind}/{index}')

    # --- 알림 ---
    def list_notifications(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"limit": limit} if limit else None
        body = self._request('GET', '/api/notifications/', params=params)
        return body.get('notifications', [])

    def mark_notification_read(self, notification_id: str) -> Dict[str, Any]:
        return self._request('PATCH', f'/api/notifications/{notification_id}/read')
