# pawpal/client/test_pet_sync.py
from unittest.mock import MagicMock

import pytest

from pawpal.client.local_store import InMemoryKeyValueStore
from pawpal.client.pet_sync import PetRegistrySync
from pawpal.client.reconciliation import FetchState
from pawpal.core.errors import (
    IndexOutOfRange, InvalidRecordKind, InvalidVaccineName, InvalidWeight, NetworkTimeout
)

MOCHI = {"id": "SSP-1-aaaaaa", "name": "Mochi", "weight_history": [], "vaccinations": []}


@pytest.fixture
def api():
    return MagicMock()


@pytest.fixture
def local_store():
    return InMemoryKeyValueStore({"ssp_pets_owner": [MOCHI]})


@pytest.fixture
def sync(api, local_store):
    return PetRegistrySync(api, local_store, 'owner')


def test_refresh_keeps_snapshot_on_empty_remote(sync, api):
    api.list_pets.return_value = []
    assert sync.refresh() == [MOCHI]
    assert sync.state is FetchState.EMPTY
    api.list_pets.assert_called_once_with('owner')


def test_register_appends_server_profile(sync, api, local_store):
    bori = {"id": "SSP-2-bbbbbb", "name": "Bori"}
    api.register_pet.return_value = bori

    assert sync.register({"name": "Bori"}) == bori
    assert [p["id"] for p in local_store.get('ssp_pets_owner')] == [MOCHI["id"], bori["id"]]


def test_local_write_survives_remote_failure(sync, api, local_store):
    api.add_weight.side_effect = NetworkTimeout()

    with pytest.raises(NetworkTimeout):
        sync.add_weight(MOCHI["id"], "5.5", "2024-03-01")

    stored = local_store.get('ssp_pets_owner')[0]
    assert stored["weight_history"] == [{"date": "2024-03-01", "weight": 5.5}]


def test_server_response_replaces_local_entry(sync, api, local_store):
    server_pet = dict(MOCHI, name="Mochi", temperament="calm")
    api.update_pet.return_value = server_pet

    sync.update(MOCHI["id"], {"temperament": "calm"})

    assert local_store.get('ssp_pets_owner') == [server_pet]


def test_purge_removes_locally_first(sync, api, local_store):
    api.purge_pet.side_effect = NetworkTimeout()
    with pytest.raises(NetworkTimeout):
        sync.purge(MOCHI["id"])
    assert local_store.get('ssp_pets_owner') == []


@pytest.mark.parametrize("weight", ["heavy", None, float('nan'), True])
def test_invalid_weight_is_rejected_before_any_write(sync, api, weight):
    with pytest.raises(InvalidWeight):
        sync.add_weight(MOCHI["id"], weight)
    api.add_weight.assert_not_called()


def test_vaccine_name_required(sync, api):
    with pytest.raises(InvalidVaccineName):
        sync.add_vaccination(MOCHI["id"], "   ")
    api.add_vaccination.assert_not_called()


def test_delete_record_validation(sync, api):
    with pytest.raises(InvalidRecordKind):
        sync.delete_record(MOCHI["id"], 'grooming', 0)
    with pytest.raises(IndexOutOfRange):
        sync.delete_record(MOCHI["id"], 'weight', 0)
    api.delete_record.assert_not_called()


def test_delete_record_for_unknown_local_pet_defers_to_server(sync, api):
    api.delete_record.return_value = {"id": "SSP-9-cccccc", "weight_history": []}
    sync.delete_record("SSP-9-cccccc", 'weight', 0)
    api.delete_record.assert_called_once_with("SSP-9-cccccc", 'weight', 0)
