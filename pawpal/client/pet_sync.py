# pawpal/client/pet_sync.py
"""
반려동물 목록의 클라이언트 측 동기화.

변경은 항상 로컬 스냅샷에 먼저 쓰고 이어서 서버에 반영합니다.
두 단계 사이에는 원자성이 없으며, 서버 반영이 실패해도 로컬 변경을 되돌리지 않습니다.
실패는 호출 측으로 그대로 전달되고 다음 refresh 에서 서버 결과로 교체됩니다.
"""
import logging
import math
from typing import Any, Dict, List, Optional

from pawpal.client.api_client import PawPalApiClient
from pawpal.client.local_store import KeyValueStore
from pawpal.client.reconciliation import FetchState, ReconciliationCache
from pawpal.core.errors import InvalidWeight, InvalidVaccineName, InvalidRecordKind, IndexOutOfRange
from pawpal.models.pet import HealthRecordKind
from pawpal.utils.datetime_utils import DateTimeUtils

PETS_NAMESPACE = 'ssp_pets'

RECORD_FIELDS = {
    HealthRecordKind.WEIGHT.value: 'weight_history',
    HealthRecordKind.VACCINATION.value: 'vaccinations',
}


class PetRegistrySync:
    def __init__(self, api: PawPalApiClient, local_store: KeyValueStore, owner_id: str):
        self.api = api
        self.owner_id = owner_id
        self.cache = ReconciliationCache(local_store, PETS_NAMESPACE)

    @property
    def pets(self) -> List[Dict[str, Any]]:
        return self.cache.items(self.owner_id)

    @property
    def state(self) -> FetchState:
        return self.cache.state(self.owner_id)

    def refresh(self, trust_empty: bool = False) -> List[Dict[str, Any]]:
        return self.cache.refresh(self.owner_id, lambda: self.api.list_pets(self.owner_id), trust_empty=trust_empty)

    def _find(self, pet_id: str) -> Optional[Dict[str, Any]]:
        return next((p for p in self.pets if p.get('id') == pet_id), None)

    def _apply_local(self, pet_id: str, mutate) -> None:
        pets = [dict(p) for p in self.pets]
        for pet in pets:
            if pet.get('id') == pet_id:
                mutate(pet)
        self.cache.write_local(self.owner_id, pets)

    def _replace_local(self, pet: Dict[str, Any]) -> None:
        """서버가 돌려준 최신 프로필로 로컬 항목을 교체합니다."""
        pets = [pet if p.get('id') == pet.get('id') else p for p in self.pets]
        self.cache.write_local(self.owner_id, pets)

    # --- 변경 ---
    def register(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        식별자를 서버가 발급하므로 등록만은 서버 응답을 받은 뒤 로컬에 추가합니다.
        """
        pet = self.api.register_pet(payload)
        self.cache.write_local(self.owner_id, self.pets + [pet])
        logging.info(f"로컬 반려동물 목록에 추가되었습니다: {pet.get('id')}")
        return pet

    def update(self, pet_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        self._apply_local(pet_id, lambda pet: pet.update(changes))
        pet = self.api.update_pet(pet_id, changes)
        self._replace_local(pet)
        return pet

    def purge(self, pet_id: str) -> None:
        self.cache.write_local(self.owner_id, [p for p in self.pets if p.get('id') != pet_id])
        self.api.purge_pet(pet_id)

    def add_weight(self, pet_id: str, weight: Any, record_date: Optional[str] = None) -> Dict[str, Any]:
        try:
            weight_value = float(weight)
        except (TypeError, ValueError) as e:
            raise InvalidWeight() from e
        if isinstance(weight, bool) or not math.isfinite(weight_value):
            raise InvalidWeight()
        record_date = record_date or DateTimeUtils.to_date_string(DateTimeUtils.today())

        def append(pet):
            pet['weight_history'] = list(pet.get('weight_history') or []) + [{"date": record_date, "weight": weight_value}]
        self._apply_local(pet_id, append)

        pet = self.api.add_weight(pet_id, weight_value, record_date)
        self._replace_local(pet)
        return pet

    def add_vaccination(self, pet_id: str, name: str, record_date: Optional[str] = None,
                        next_due_date: Optional[str] = None) -> Dict[str, Any]:
        if not name or not name.strip():
            raise InvalidVaccineName()
        record_date = record_date or DateTimeUtils.to_date_string(DateTimeUtils.today())

        def append(pet):
            record = {"name": name.strip(), "date": record_date, "next_due_date": next_due_date or ''}
            pet['vaccinations'] = list(pet.get('vaccinations') or []) + [record]
        self._apply_local(pet_id, append)

        pet = self.api.add_vaccination(pet_id, name.strip(), record_date, next_due_date)
        self._replace_local(pet)
        return pet

    def delete_record(self, pet_id: str, kind: str, index: int) -> Dict[str, Any]:
        field_name = RECORD_FIELDS.get(kind)
        if field_name is None:
            raise InvalidRecordKind()
        local_pet = self._find(pet_id)
        records = list((local_pet or {}).get(field_name) or [])
        if local_pet is not None and not 0 <= index < len(records):
            raise IndexOutOfRange()

        if local_pet is not None:
            def remove(pet):
                pet[field_name] = records[:index] + records[index + 1:]
            self._apply_local(pet_id, remove)

        pet = self.api.delete_record(pet_id, kind, index)
        self._replace_local(pet)
        return pet
