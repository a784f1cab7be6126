# conftest.py
"""
테스트 공용 픽스처.

Firestore 대신 InMemoryDocumentStore 를, OpenAI / Storage / 인증 / FCM 대신
가짜 협력 객체를 주입해 create_app('testing', overrides=...) 으로 앱을 만듭니다.
"""
import base64
import copy
import itertools
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from pawpal import create_app
from pawpal.core.errors import AccountNotFound, DocumentNotFound, EmailInUse, InvalidCredential, WeakPassword
from pawpal.core.security import issue_tokens
from pawpal.models.user import ProviderAccount
from pawpal.services.content_service import ContentService
from pawpal.services.document_store import DOCUMENT_ID, BatchWrite, DocumentStore
from pawpal.services.push_service import PushService
from pawpal.services.storage_service import StorageService
from pawpal.utils.datetime_utils import DateTimeUtils

PNG_BYTES = b'\x89PNG\r\n\x1a\nfake-image'


# =====================================================================================
# 인메모리 문서 저장소
# =====================================================================================
class _ServerTimestamp:
    pass


class _ArrayUnion:
    def __init__(self, values):
        self.values = list(values)


class _Increment:
    def __init__(self, amount):
        self.amount = amount


class InMemoryDocumentStore(DocumentStore):
    """
    DocumentStore 와 같은 인터페이스를 dict 로 구현한 테스트용 저장소.
    서버 타임스탬프는 호출 순서대로 증가하는 UTC 시각으로 채웁니다.
    """
    def __init__(self):
        self.db = None
        self.timeout = 1.0
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._ids = itertools.count(1)
        self._ticks = itertools.count(1)
        self._base_time = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self._watchers: List[tuple] = []

    # --- 센티널 ---
    def server_timestamp(self):
        return _ServerTimestamp()

    def array_union(self, values):
        return _ArrayUnion(values)

    def increment(self, amount=1):
        return _Increment(amount)

    def _resolve(self, existing: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        resolved = {}
        for key, value in data.items():
            if isinstance(value, _ServerTimestamp):
                resolved[key] = self._base_time + timedelta(seconds=next(self._ticks))
            elif isinstance(value, _ArrayUnion):
                current = list(existing.get(key) or [])
                resolved[key] = current + [v for v in value.values if v not in current]
            elif isinstance(value, _Increment):
                resolved[key] = (existing.get(key) or 0) + value.amount
            else:
                resolved[key] = copy.deepcopy(DateTimeUtils.for_firestore(value))
        return resolved

    def _collection(self, path: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(path, {})

    def _notify(self, path: str) -> None:
        for watch_path, callback, kwargs in list(self._watchers):
            if watch_path == path:
                callback(self.query(path, **kwargs))

    # --- 단건 CRUD ---
    def new_id(self, path: str) -> str:
        return f"doc-{next(self._ids)}"

    def get(self, path, doc_id):
        if not doc_id:
            return None
        doc = self._collection(path).get(doc_id)
        if doc is None:
            return None
        result = copy.deepcopy(doc)
        result['id'] = doc_id
        return result

    def _apply_set(self, path, doc_id, data, merge=False):
        collection = self._collection(path)
        existing = collection.get(doc_id, {}) if merge else {}
        merged = dict(existing)
        merged.update(self._resolve(existing, data))
        collection[doc_id] = merged

    def _apply_update(self, path, doc_id, data):
        collection = self._collection(path)
        existing = collection[doc_id]
        existing.update(self._resolve(existing, data))

    def set(self, path, doc_id, data, merge=False):
        self._apply_set(path, doc_id, data, merge)
        self._notify(path)

    def add(self, path, data):
        doc_id = self.new_id(path)
        self.set(path, doc_id, data)
        return doc_id

    def update(self, path, doc_id, data):
        if doc_id not in self._collection(path):
            raise DocumentNotFound()
        self._apply_update(path, doc_id, data)
        self._notify(path)

    def delete(self, path, doc_id):
        self._collection(path).pop(doc_id, None)
        self._notify(path)

    # --- 쿼리 ---
    @staticmethod
    def _matches(doc: Dict[str, Any], filters) -> bool:
        for field_name, op, value in filters:
            actual = doc.get(field_name)
            if op == '==' and actual != value:
                return False
            if op == 'array_contains' and value not in (actual or []):
                return False
        return True

    def query(self, path, filters=(), order_by=None, descending=False, limit=None, start_after=None):
        docs = [self.get(path, doc_id) for doc_id in self._collection(path)]
        docs = [d for d in docs if self._matches(d, list(filters))]
        if order_by:
            field_name = 'id' if order_by == DOCUMENT_ID else order_by
            docs.sort(key=lambda d: (d.get(field_name) is None, d.get(field_name)), reverse=descending)
        if start_after:
            ids = [d['id'] for d in docs]
            if start_after in ids:
                docs = docs[ids.index(start_after) + 1:]
        if limit:
            docs = docs[:limit]
        return docs

    def watch(self, path, callback, filters=(), order_by=None, descending=False, limit=None):
        entry = (path, callback, dict(filters=list(filters), order_by=order_by, descending=descending, limit=limit))
        self._watchers.append(entry)
        callback(self.query(path, **entry[2]))
        return lambda: self._watchers.remove(entry)

    # --- 배치 ---
    def commit(self, writes: List[BatchWrite]) -> None:
        """모든 update 대상의 존재를 먼저 확인한 뒤 적용합니다 (전부 성공 또는 전부 실패)."""
        for write in writes:
            if write.op not in ('set', 'update', 'delete'):
                raise ValueError(f"지원하지 않는 배치 작업입니다: {write.op}")
            if write.op == 'update' and write.doc_id not in self._collection(write.path):
                raise DocumentNotFound()
        for write in writes:
            if write.op == 'set':
                self._apply_set(write.path, write.doc_id, write.data, write.merge)
            elif write.op == 'update':
                self._apply_update(write.path, write.doc_id, write.data)
            else:
                self._collection(write.path).pop(write.doc_id, None)
        for path in {w.path for w in writes}:
            self._notify(path)

    # 테스트 편의
    def all(self, path: str) -> List[Dict[str, Any]]:
        return self.query(path)


# =====================================================================================
# 외부 서비스 가짜 객체
# =====================================================================================
class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name
        self.public_url = f"https://storage.test/{name}"

    def exists(self):
        return self.name in self.bucket.files

    def download_as_bytes(self):
        return self.bucket.files[self.name]

    def upload_from_string(self, data, content_type=None):
        self.bucket.files[self.name] = data

    def make_public(self):
        self.bucket.public.add(self.name)

    def generate_signed_url(self, version, expiration, method, content_type):
        return f"https://upload.test/{self.name}?method={method}"


class FakeBucket:
    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.public = set()

    def blob(self, name):
        return FakeBlob(self, name)


def make_openai_client(text: str = "Healthy and happy.", image: bytes = PNG_BYTES) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))]
    )
    image_response = SimpleNamespace(data=[SimpleNamespace(b64_json=base64.b64encode(image).decode())])
    client.images.generate.return_value = image_response
    client.images.edit.return_value = image_response
    return client


class FakeIdentityProvider:
    """이메일/비밀번호 계정과 제공자 ID 토큰을 메모리에 보관하는 인증 제공자."""
    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.provider_tokens: Dict[str, ProviderAccount] = {}
        self.verification_emails: List[str] = []
        self.display_names: Dict[str, str] = {}
        self._uids = itertools.count(1)

    def init_app(self, app):
        pass

    def add_account(self, email: str, password: str, email_verified: bool = True, uid: Optional[str] = None) -> str:
        uid = uid or f"uid-{next(self._uids)}"
        self.accounts[email] = {"uid": uid, "password": password, "email_verified": email_verified}
        return uid

    def _account(self, email: str) -> ProviderAccount:
        record = self.accounts[email]
        return ProviderAccount(external_id=record["uid"], email=email,
                               email_verified=record["email_verified"], id_token=f"id-token-{record['uid']}")

    def create_account(self, email, password, display_name):
        if len(password) < 6:
            raise WeakPassword()
        if email in self.accounts:
            raise EmailInUse()
        self.add_account(email, password, email_verified=False)
        account = self._account(email)
        account.display_name = display_name
        return account

    def sign_in_with_password(self, email, password):
        if email not in self.accounts:
            raise AccountNotFound()
        if self.accounts[email]["password"] != password:
            raise InvalidCredential()
        return self._account(email)

    def sign_in_with_provider(self, kind, id_token):
        if id_token not in self.provider_tokens:
            raise InvalidCredential()
        return self.provider_tokens[id_token]

    def get_account(self, uid):
        for email, record in self.accounts.items():
            if record["uid"] == uid:
                return self._account(email)
        return None

    def update_display_name(self, uid, display_name):
        self.display_names[uid] = display_name

    def send_verification_email(self, id_token):
        self.verification_emails.append(id_token)


class FakeQRService:
    """페이로드를 그대로 바이트로 담는 QR 대역."""
    PREFIX = b'QR:'

    def encode(self, payload: str) -> bytes:
        return self.PREFIX + payload.encode()

    def decode(self, image_bytes: bytes) -> Optional[str]:
        if not image_bytes.startswith(self.PREFIX):
            return None
        return image_bytes[len(self.PREFIX):].decode()


# =====================================================================================
# 픽스처
# =====================================================================================
@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def openai_client():
    return make_openai_client()


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def sent_messages():
    return []


@pytest.fixture
def app(store, openai_client, bucket, identity, sent_messages):
    def sender(message):
        sent_messages.append(message)
        return f"projects/pawpal-test/messages/{len(sent_messages)}"

    overrides = {
        'store': store,
        'content': ContentService(client=openai_client),
        'storage': StorageService(bucket=bucket),
        'identity': identity,
        'push': PushService(store, sender=sender),
        'qr': FakeQRService(),
    }
    app = create_app('testing', overrides=overrides)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.services


@pytest.fixture
def make_user(store):
    """users 문서를 직접 만들어 두는 헬퍼."""
    def _make_user(uid: str, display_name: Optional[str] = None, username: Optional[str] = None,
                   email: Optional[str] = None, phone_number: Optional[str] = None) -> str:
        display_name = display_name or uid.capitalize()
        data = {
            'uid': uid,
            'email': email or f"{uid}@pawpal.test",
            'displayName': display_name,
            'username': username or uid.lower(),
            'photoURL': None,
            'lowercaseDisplayName': display_name.lower(),
        }
        if phone_number is not None:
            data['phoneNumber'] = phone_number
        store.set('users', uid, data)
        return uid
    return _make_user


@pytest.fixture
def auth_headers(app) -> Callable[..., Dict[str, str]]:
    def _auth_headers(uid: str, email_verified: bool = True) -> Dict[str, str]:
        with app.app_context():
            tokens = issue_tokens(uid, email_verified)
        return {"Authorization": f"Bearer {tokens['access_token']}"}
    return _auth_headers
