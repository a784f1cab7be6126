# pawpal/client/test_api_client.py
import json
from unittest.mock import MagicMock

import pytest
import requests

from pawpal.client.api_client import ERROR_CLASSES, PawPalApiClient
from pawpal.core.errors import (
    BiologicalLimitExceeded, DomainValidationError, IndexOutOfRange, NetworkTimeout, ServiceError, UsernameTaken
)


def _response(status_code, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.content = json.dumps(body).encode() if body is not None else b''
    response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session):
    return PawPalApiClient('http://pawpal.test/', timeout=3, session=session)


def test_error_registry_covers_hierarchy():
    assert ERROR_CLASSES['INDEX_OUT_OF_RANGE'] is IndexOutOfRange
    assert ERROR_CLASSES['USERNAME_TAKEN'] is UsernameTaken
    assert ERROR_CLASSES['NETWORK_TIMEOUT'] is NetworkTimeout


def test_login_stores_tokens_and_sends_bearer(api, session):
    session.request.return_value = _response(200, {"access_token": "a", "refresh_token": "r"})
    api.login('cocomom', 'secret1')

    session.request.return_value = _response(200, {"pets": [{"id": "SSP-1-aaaaaa"}], "can_see_private": True})
    assert api.list_pets('owner') == [{"id": "SSP-1-aaaaaa"}]

    args, kwargs = session.request.call_args
    assert args == ('GET', 'http://pawpal.test/api/pets/owner/owner')
    assert kwargs['headers'] == {"Authorization": "Bearer a"}
    assert kwargs['timeout'] == 3


def test_error_code_is_restored_as_exception(api, session):
    session.request.return_value = _response(400, {"error_code": "BIOLOGICAL_LIMIT_EXCEEDED", "message": "too old"})

    with pytest.raises(BiologicalLimitExceeded) as exc_info:
        api.register_pet({"name": "Old"})
    assert exc_info.value.message == "too old"


def test_forbidden_becomes_permission_error(api, session):
    session.request.return_value = _response(403, {"error_code": "FORBIDDEN", "message": "not yours"})
    with pytest.raises(PermissionError):
        api.update_pet('SSP-1-aaaaaa', {"name": "x"})


@pytest.mark.parametrize("status_code, body, expected", [
    (400, {"error_code": "PET_NOT_FOUND_SOMETHING"}, DomainValidationError),
    (400, {"error_code": "MISSING_FIELD", "message": "name"}, DomainValidationError),
    (500, {"error_code": "PET_REGISTRATION_FAILED"}, ServiceError),
    (502, None, ServiceError),
])
def test_unknown_errors_fall_back(api, session, status_code, body, expected):
    session.request.return_value = _response(status_code, body)
    with pytest.raises(expected):
        api.add_weight('SSP-1-aaaaaa', 5.0)


def test_timeout_and_connection_errors(api, session):
    session.request.side_effect = requests.Timeout("slow")
    with pytest.raises(NetworkTimeout):
        api.list_notifications()

    session.request.side_effect = requests.ConnectionError("down")
    with pytest.raises(ServiceError):
        api.list_notifications()


def test_no_content_returns_none(api, session):
    session.request.return_value = _response(204)
    assert api.purge_pet('SSP-1-aaaaaa') is None
