import threading

from shipyard.controllers.workqueue import WorkQueue


def test_fifo_and_dedup():
    q = WorkQueue()
    q.add("a")
    q.add("b")
    q.add("a")
    assert len(q) == 2
    assert q.get(timeout=0) == "a"
    assert q.get(timeout=0) == "b"
    assert q.get(timeout=0.01) is None


def test_key_added_while_processing_waits_for_done():
    q = WorkQueue()
    q.add("a")
    key = q.get(timeout=0)
    q.add("a")
    assert q.get(timeout=0.01) is None

    q.done(key)
    assert q.get(timeout=0) == "a"


def test_shutdown_wakes_blocked_getters():
    q = WorkQueue()
    results = []
    t = threading.Thread(target=lambda: results.append(q.get()))
    t.start()
    q.shutdown()
    t.join(timeout=2)
    assert not t.is_alive()
    assert results == [None]
    q.add("ignored")
    assert len(q) == 0


def test_same_key_never_processed_concurrently():
    q = WorkQueue()
    active = set()
    overlaps = []
    lock = threading.Lock()

    def worker():
        while True:
            key = q.get(timeout=0.2)
            if key is None:
                return
            with lock:
                if key in active:
                    overlaps.append(key)
                active.add(key)
            with lock:
                active.discard(key)
            q.done(key)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for i in range(200):
        q.add(f"app-{i % 3}")
    for t in threads:
        t.join()
    assert overlaps == []
