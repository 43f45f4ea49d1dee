"""
Concurrent access to the key store from many threads while the reaper sweeps
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from token_orchestrator.errors import KeyForbidden, KeyNotFound
from token_orchestrator.services.keystore import KeyStore
from tests.conftest import LEASE


def test_parallel_issue_keeps_every_record(store):
    with ThreadPoolExecutor(max_workers=16) as pool:
        issued = list(pool.map(lambda _: store.issue(), range(2000)))
    assert len(store) == 2000
    assert len({key_id for key_id, _ in issued}) == 2000


def test_keep_alive_racing_reap_never_resurrects(clock):
    """A keep-alive that loses the race to the reaper reports NotFound"""
    store = KeyStore(lease_duration=LEASE, clock=clock)
    ids = [store.issue()[0] for _ in range(500)]
    for key_id in ids:
        store.keep_alive(key_id)
    clock.advance(LEASE + 1)

    outcomes = []
    barrier = threading.Barrier(2)

    def keep_alive_all():
        barrier.wait()
        for key_id in ids:
            try:
                store.keep_alive(key_id)
                outcomes.append("ok")
            except KeyForbidden:
                outcomes.append("forbidden")
            except KeyNotFound:
                outcomes.append("not_found")

    def reap():
        barrier.wait()
        store.reap()

    threads = [threading.Thread(target=keep_alive_all), threading.Thread(target=reap)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert "ok" not in outcomes
    assert len(store) == 0
    for key_id in ids:
        with pytest.raises(KeyNotFound):
            store.keep_alive(key_id)


def test_mixed_operations_leave_consistent_records(store, clock):
    ids = [store.issue()[0] for _ in range(200)]

    def churn(key_id):
        store.keep_alive(key_id)
        store.set_blocked(key_id, True)
        store.set_blocked(key_id, False)
        store.fetch(key_id)
        store.reap()
        return store.describe(key_id)

    with ThreadPoolExecutor(max_workers=8) as pool:
        infos = list(pool.map(churn, ids))

    for info in infos:
        assert info.blocked is False
        assert info.expires_at == info.last_activity + LEASE
    assert len(store) == 200
