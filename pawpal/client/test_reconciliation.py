# pawpal/client/test_reconciliation.py
import pytest

from pawpal.client.local_store import InMemoryKeyValueStore
from pawpal.client.reconciliation import FetchState, ReconciliationCache
from pawpal.core.errors import NetworkTimeout

SNAPSHOT = [{"id": "SSP-1-aaaaaa", "name": "Mochi"}]


@pytest.fixture
def local_store():
    return InMemoryKeyValueStore({"ssp_pets_owner": SNAPSHOT})


@pytest.fixture
def cache(local_store):
    return ReconciliationCache(local_store, 'ssp_pets')


def test_local_snapshot_is_available_before_fetch(cache):
    assert cache.items('owner') == SNAPSHOT
    assert cache.state('owner') is FetchState.NOT_FETCHED


def test_non_empty_remote_overwrites_local(cache, local_store):
    remote = [{"id": "SSP-2-bbbbbb", "name": "Bori"}]

    result = cache.refresh('owner', lambda: remote)

    assert result == remote
    assert local_store.get('ssp_pets_owner') == remote
    assert cache.state('owner') is FetchState.POPULATED


def test_empty_remote_keeps_local_snapshot(cache, local_store):
    result = cache.refresh('owner', lambda: [])

    assert result == SNAPSHOT
    assert local_store.get('ssp_pets_owner') == SNAPSHOT
    assert cache.state('owner') is FetchState.EMPTY


def test_trusted_empty_remote_clears_local(cache, local_store):
    assert cache.refresh('owner', lambda: [], trust_empty=True) == []
    assert local_store.get('ssp_pets_owner') == []
    assert cache.state('owner') is FetchState.EMPTY


def test_fetch_failure_keeps_local_snapshot(cache):
    def fetch():
        raise NetworkTimeout()

    assert cache.refresh('owner', fetch) == SNAPSHOT
    assert cache.state('owner') is FetchState.NOT_FETCHED


def test_unknown_owner_starts_empty(cache):
    assert cache.items('someone-else') == []
