# pawpal/client/test_local_store.py
from pawpal.client.local_store import InMemoryKeyValueStore, JsonFileKeyValueStore


def test_in_memory_store_keeps_copies():
    store = InMemoryKeyValueStore()
    items = [{"id": "n-1"}]
    store.set('key', items)
    items.append({"id": "n-2"})

    assert store.get('key') == [{"id": "n-1"}]
    assert store.get('missing', default=[]) == []
    store.delete('key')
    assert store.get('key') is None


def test_json_file_store_persists_between_instances(tmp_path):
    path = str(tmp_path / 'pawpal.json')
    JsonFileKeyValueStore(path).set('ssp_pets_owner', [{"id": "SSP-1-aaaaaa"}])

    reopened = JsonFileKeyValueStore(path)
    assert reopened.get('ssp_pets_owner') == [{"id": "SSP-1-aaaaaa"}]

    reopened.delete('ssp_pets_owner')
    assert JsonFileKeyValueStore(path).get('ssp_pets_owner', default=[]) == []


def test_json_file_store_recovers_from_corrupt_file(tmp_path):
    path = tmp_path / 'pawpal.json'
    path.write_text('{not json', encoding='utf-8')
    store = JsonFileKeyValueStore(str(path))

    assert store.get('anything') is None
    store.set('key', 1)
    assert store.get('key') == 1
