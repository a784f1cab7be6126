# pawpal/client/reconciliation.py
import logging
from enum import Enum
from typing import Any, Callable, Dict, List

from pawpal.client.local_store import KeyValueStore
from pawpal.core.errors import PawPalError


class FetchState(Enum):
    """
    원격 조회 결과 상태.
    EMPTY 는 '원격에 정말 없음' 과 '아직 반영 전' 을 구분할 수 없는 상태이므로
    기본적으로 로컬 스냅샷을 지우지 않습니다.
    """
    NOT_FETCHED = "not_fetched"
    EMPTY = "empty"
    POPULATED = "populated"


class ReconciliationCache:
    """
    소유자 ID 별 목록 캐시. 로컬 스냅샷을 먼저 보여주고, 원격 결과가 비어 있지 않으면 교체합니다.

    :param local_store: 스냅샷을 보관할 키-값 저장소
    :param namespace: 저장 키 접두사 (예: 'ssp_pets' -> 'ssp_pets_<owner_id>')
    """
    def __init__(self, local_store: KeyValueStore, namespace: str):
        self.local_store = local_store
        self.namespace = namespace
        self._memory: Dict[str, List[Dict[str, Any]]] = {}
        self._states: Dict[str, FetchState] = {}

    def _key(self, owner_id: str) -> str:
        return f"{self.namespace}_{owner_id}"

    def state(self, owner_id: str) -> FetchState:
        return self._states.get(owner_id, FetchState.NOT_FETCHED)

    def items(self, owner_id: str) -> List[Dict[str, Any]]:
        if owner_id not in self._memory:
            self.load_local(owner_id)
        return self._memory[owner_id]

    def load_local(self, owner_id: str) -> List[Dict[str, Any]]:
        snapshot = self.local_store.get(self._key(owner_id), default=[]) or []
        self._memory[owner_id] = list(snapshot)
        return self._memory[owner_id]

    def write_local(self, owner_id: str, items: List[Dict[str, Any]]) -> None:
        """메모리와 로컬 스냅샷을 함께 갱신합니다."""
        self._memory[owner_id] = list(items)
        self.local_store.set(self._key(owner_id), self._memory[owner_id])

    def reconcile(self, owner_id: str, remote_items: List[Dict[str, Any]], trust_empty: bool = False) -> FetchState:
        """
        원격 결과를 반영합니다. 비어 있지 않으면 메모리와 로컬을 덮어쓰고,
        비어 있으면 trust_empty 가 아닌 한 로컬 스냅샷을 그대로 둡니다.
        """
        if remote_items:
            self.write_local(owner_id, remote_items)
            self._states[owner_id] = FetchState.POPULATED
        else:
            if trust_empty:
                self.write_local(owner_id, [])
            self._states[owner_id] = FetchState.EMPTY
        return self._states[owner_id]

    def refresh(self, owner_id: str, fetch: Callable[[], List[Dict[str, Any]]],
                trust_empty: bool = False) -> List[Dict[str, Any]]:
        """로컬 스냅샷을 읽은 뒤 원격을 조회해 반영합니다. 원격 실패 시 로컬 스냅샷을 유지합니다."""
        self.load_local(owner_id)
        try:
            remote_items = fetch()
        except PawPalError as e:
            logging.warning(f"원격 조회 실패, 로컬 스냅샷을 유지합니다 ({self._key(owner_id)}): {e.message}")
            return self._memory[owner_id]
        self.reconcile(owner_id, remote_items, trust_empty=trust_empty)
        return self._memory[owner_id]
