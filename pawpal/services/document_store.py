# pawpal/services/document_store.py
"""
Firestore 문서 저장소 게이트웨이.

모든 도메인 서비스는 firestore 클라이언트를 직접 다루지 않고 이 게이트웨이를 통해
CRUD / 쿼리 / 배치 쓰기를 수행합니다. 각 호출에는 설정된 타임아웃이 적용되며,
google.api_core 예외는 여기서 로그를 남긴 뒤 도메인 예외로 변환됩니다.

컬렉션 경로는 'chats/{id}/messages' 처럼 슬래시로 구분된 하위 컬렉션 경로를 허용합니다.
반환되는 문서(dict)에는 항상 'id' 키로 문서 ID 가 포함됩니다.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from firebase_admin import firestore
from google.cloud.firestore_v1.field_path import FieldPath
from google.api_core import exceptions as google_exceptions

from pawpal.core.errors import DocumentNotFound, NetworkTimeout, ServiceError
from pawpal.utils.datetime_utils import DateTimeUtils

# (필드, 연산자, 값) 형태의 조건. 연산자는 Firestore 문자열 연산자('==', 'array_contains' 등)
Filter = Tuple[str, str, Any]

# 문서 ID 기준 정렬/커서에 사용하는 특수 필드명
DOCUMENT_ID = '__name__'


@dataclass
class BatchWrite:
    """배치 커밋에 포함될 단일 쓰기 작업."""
    op: str                      # 'set' | 'update' | 'delete'
    path: str
    doc_id: str
    data: Optional[Dict[str, Any]] = None
    merge: bool = False


class DocumentStore:
    """Firestore 클라이언트를 감싸는 타입 있는 CRUD/쿼리 게이트웨이."""

    def __init__(self, client=None, timeout: float = 10.0):
        self.db = client if client is not None else firestore.client()
        self.timeout = timeout

    # --- 오류 변환 ---
    @contextmanager
    def _guard(self, action: str, path: str):
        try:
            yield
        except google_exceptions.DeadlineExceeded as e:
            logging.error(f"Firestore {action} 타임아웃 (path: {path}): {e}")
            raise NetworkTimeout() from e
        except google_exceptions.NotFound as e:
            logging.warning(f"Firestore {action} 대상 문서 없음 (path: {path}): {e}")
            raise DocumentNotFound() from e
        except google_exceptions.GoogleAPICallError as e:
            logging.error(f"Firestore {action} 실패 (path: {path}): {e}", exc_info=True)
            raise ServiceError() from e

    @staticmethod
    def _to_document(snapshot) -> Dict[str, Any]:
        data = DateTimeUtils.from_firestore(snapshot.to_dict() or {})
        data['id'] = snapshot.id
        return data

    # --- 센티널 값 ---
    def server_timestamp(self):
        """서버가 할당하는 타임스탬프 (메시지 정렬 기준)."""
        return firestore.SERVER_TIMESTAMP

    def array_union(self, values: List[Any]):
        return firestore.ArrayUnion(values)

    def increment(self, amount: int = 1):
        return firestore.Increment(amount)

    # --- 단건 CRUD ---
    def new_id(self, path: str) -> str:
        """쓰기 없이 자동 생성 문서 ID 를 예약합니다 (배치 쓰기에서 참조용)."""
        return self.db.collection(path).document().id

    def get(self, path: str, doc_id: str) -> Optional[Dict[str, Any]]:
        if not doc_id:
            return None
        with self._guard('get', f"{path}/{doc_id}"):
            snapshot = self.db.collection(path).document(doc_id).get(timeout=self.timeout)
        if not snapshot.exists:
            return None
        return self._to_document(snapshot)

    def set(self, path: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        with self._guard('set', f"{path}/{doc_id}"):
            self.db.collection(path).document(doc_id).set(
                DateTimeUtils.for_firestore(data), merge=merge, timeout=self.timeout
            )

    def add(self, path: str, data: Dict[str, Any]) -> str:
        with self._guard('add', path):
            _, doc_ref = self.db.collection(path).add(DateTimeUtils.for_firestore(data), timeout=self.timeout)
        return doc_ref.id

    def update(self, path: str, doc_id: str, data: Dict[str, Any]) -> None:
        with self._guard('update', f"{path}/{doc_id}"):
            self.db.collection(path).document(doc_id).update(
                DateTimeUtils.for_firestore(data), timeout=self.timeout
            )

    def delete(self, path: str, doc_id: str) -> None:
        with self._guard('delete', f"{path}/{doc_id}"):
            self.db.collection(path).document(doc_id).delete(timeout=self.timeout)

    # --- 쿼리 ---
    def _build_query(self, path: str, filters: Iterable[Filter], order_by: Optional[str],
                     descending: bool, limit: Optional[int], start_after: Optional[str]):
        collection = self.db.collection(path)
        query = collection
        for field_name, op, value in filters:
            query = query.where(field_name, op, value)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            order_field = FieldPath.document_id() if order_by == DOCUMENT_ID else order_by
            query = query.order_by(order_field, direction=direction)
        if start_after:
            cursor_doc = collection.document(start_after).get(timeout=self.timeout)
            if cursor_doc.exists:
                query = query.start_after(cursor_doc)
        if limit:
            query = query.limit(limit)
        return query

    def query(self, path: str, filters: Iterable[Filter] = (), order_by: Optional[str] = None,
              descending: bool = False, limit: Optional[int] = None,
              start_after: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        조건/정렬/개수 제한/커서(문서 ID) 를 조합한 쿼리를 실행합니다.
        start_after 로 지정한 문서가 없으면 커서 없이 처음부터 조회합니다.
        """
        with self._guard('query', path):
            query = self._build_query(path, list(filters), order_by, descending, limit, start_after)
            return [self._to_document(doc) for doc in query.stream(timeout=self.timeout)]

    def watch(self, path: str, callback: Callable[[List[Dict[str, Any]]], None],
              filters: Iterable[Filter] = (), order_by: Optional[str] = None,
              descending: bool = False, limit: Optional[int] = None) -> Callable[[], None]:
        """
        실시간 구독. 결과 집합이 바뀔 때마다 callback(문서 목록) 을 호출하고,
        구독 해제 함수를 반환합니다.
        """
        def _on_snapshot(docs, changes, read_time):
            callback([self._to_document(doc) for doc in docs])

        with self._guard('watch', path):
            query = self._build_query(path, list(filters), order_by, descending, limit, None)
            watch = query.on_snapshot(_on_snapshot)
        return watch.unsubscribe

    # --- 배치 ---
    def commit(self, writes: List[BatchWrite]) -> None:
        """여러 문서에 대한 쓰기를 하나의 원자적 배치로 커밋합니다 (전부 성공 또는 전부 실패)."""
        batch = self.db.batch()
        for write in writes:
            ref = self.db.collection(write.path).document(write.doc_id)
            if write.op == 'set':
                batch.set(ref, DateTimeUtils.for_firestore(write.data), merge=write.merge)
            elif write.op == 'update':
                batch.update(ref, DateTimeUtils.for_firestore(write.data))
            elif write.op == 'delete':
                batch.delete(ref)
            else:
                raise ValueError(f"지원하지 않는 배치 작업입니다: {write.op}")
        with self._guard('commit', ', '.join(f"{w.path}/{w.doc_id}" for w in writes)):
            batch.commit(timeout=self.timeout)
