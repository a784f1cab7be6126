# pawpal/client/local_store.py
"""
클라이언트 로컬 키-값 저장소.

원격 결과를 받기 전에 먼저 보여줄 스냅샷을 보관합니다.
값은 JSON 으로 직렬화 가능한 객체만 저장합니다.
"""
import json
import logging
import os
from typing import Any, Dict, Optional


class KeyValueStore:
    """get/set/delete 만 제공하는 최소 인터페이스."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else default

    def set(self, key: str, value: Any) -> None:
        # 직렬화된 사본을 보관해 호출 측의 이후 변경이 스냅샷에 새지 않도록 합니다.
        self._data[key] = json.dumps(value, ensure_ascii=False, default=str)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """단일 JSON 파일에 모든 키를 저장합니다. 파일이 손상되었으면 빈 저장소로 시작합니다."""

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning(f"로컬 저장소 파일을 읽지 못했습니다 ({self.path}): {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, Any]) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, default=str)
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
