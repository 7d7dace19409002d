import threading

import pytest

from shipyard.pools.registry import PoolRegistry
from shipyard.store.errors import ConflictError, NotFoundError
from shipyard.store.memory import MemoryStore


def _pool(name, limit, apps=None):
    return {
        "kind": "Pool",
        "metadata": {"name": name},
        "spec": {"namespace": f"ns-{name}", "appQuotaLimit": limit},
        "status": {"apps": apps or []},
    }


def test_resolve_found_and_missing():
    reg = PoolRegistry(MemoryStore([_pool("p", 2)]))
    pool = reg.resolve("p")
    assert pool.spec.namespace == "ns-p"
    assert pool.spec.app_quota_limit == 2
    assert reg.resolve("nope") is None


def test_reserve_until_full():
    store = MemoryStore([_pool("p", 2)])
    reg = PoolRegistry(store)
    assert reg.try_reserve("p", "a")
    assert reg.try_reserve("p", "b")
    assert not reg.try_reserve("p", "c")
    assert store.get("Pool", "p")["status"]["apps"] == ["a", "b"]


def test_reserve_is_idempotent_for_holder():
    reg = PoolRegistry(MemoryStore([_pool("p", 1)]))
    assert reg.try_reserve("p", "a")
    assert reg.try_reserve("p", "a")
    assert reg.occupancy("p") == 1


def test_zero_quota_admits_nobody():
    reg = PoolRegistry(MemoryStore([_pool("p", 0)]))
    assert not reg.try_reserve("p", "a")


def test_reserve_on_missing_pool_raises():
    reg = PoolRegistry(MemoryStore())
    with pytest.raises(NotFoundError):
        reg.try_reserve("missing", "a")


def test_release_is_idempotent():
    reg = PoolRegistry(MemoryStore([_pool("p", 1, apps=["a"])]))
    reg.release("p", "a")
    reg.release("p", "a")
    reg.release("p", "never-held")
    reg.release("missing-pool", "a")
    assert reg.occupancy("p") == 0
    assert reg.try_reserve("p", "b")


def test_release_all_keeps_requested_pool():
    store = MemoryStore([_pool("p1", 3, apps=["a"]), _pool("p2", 3, apps=["a", "b"]), _pool("p3", 3, apps=["a"])])
    reg = PoolRegistry(store)
    reg.release_all("a", keep="p3")
    assert store.get("Pool", "p1")["status"]["apps"] == []
    assert store.get("Pool", "p2")["status"]["apps"] == ["b"]
    assert store.get("Pool", "p3")["status"]["apps"] == ["a"]


def test_concurrent_reservations_admit_at_most_remaining_slots():
    store = MemoryStore([_pool("p", 5, apps=["x", "y"])])
    reg = PoolRegistry(store)
    results = {}
    barrier = threading.Barrier(20)

    def worker(i):
        barrier.wait()
        results[i] = reg.try_reserve("p", f"app-{i}")

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(results.values()) == 3
    assert len(store.get("Pool", "p")["status"]["apps"]) == 5


def test_registries_sharing_a_store_do_not_over_admit():
    store = MemoryStore([_pool("p", 3)])
    registries = [PoolRegistry(store) for _ in range(4)]
    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(12)

    def worker(i):
        barrier.wait()
        ok = registries[i % 4].try_reserve("p", f"app-{i}")
        with lock:
            results.append(ok)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(12)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 3
    assert len(store.get("Pool", "p")["status"]["apps"]) == 3


def test_reserve_retries_on_conflict():
    store = MemoryStore([_pool("p", 2)])
    reg = PoolRegistry(store)
    real_update = store.update
    calls = {"n": 0}

    def flaky_update(obj):
        calls["n"] += 1
        if calls["n"] == 1:
            raise ConflictError("stale")
        return real_update(obj)

    store.update = flaky_update
    assert reg.try_reserve("p", "a")
    assert calls["n"] == 2
    assert store.get("Pool", "p")["status"]["apps"] == ["a"]
