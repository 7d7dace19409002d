import threading
import time

from shipyard.config.models import App, AppPhase
from shipyard.controllers.app_controller import AppReconciler
from shipyard.controllers.manager import Controller
from shipyard.pools.registry import PoolRegistry
from shipyard.store.memory import MemoryStore
from shipyard.templates.storage import Storage, ensure_default_templates


class RecordingReconciler:
    def __init__(self):
        self.calls = []

    def reconcile(self, name):
        self.calls.append(name)


class FakeHelm:
    def __init__(self):
        self.deleted = []

    def update_chart(self, app_chart, config):
        pass

    def delete_chart(self, app_name):
        self.deleted.append(app_name)


def _app(name, pool="gold"):
    return {"kind": "App", "metadata": {"name": name}, "spec": {"pool": pool}}


def _drain(controller):
    while controller.process_next(timeout=0):
        pass


def test_spec_changes_enqueue_but_status_writes_do_not():
    store = MemoryStore()
    rec = RecordingReconciler()
    controller = Controller(rec, store)

    store.create(_app("a"))
    _drain(controller)
    assert rec.calls == ["a"]

    obj = store.get("App", "a")
    obj["status"] = {"phase": "Running", "message": ""}
    store.update(obj)
    _drain(controller)
    assert rec.calls == ["a"]

    obj = store.get("App", "a")
    obj["spec"]["pool"] = "silver"
    store.update(obj)
    _drain(controller)
    assert rec.calls == ["a", "a"]


def test_resync_enqueues_every_app():
    store = MemoryStore([_app("a"), _app("b")])
    rec = RecordingReconciler()
    controller = Controller(rec, store)
    _drain(controller)
    rec.calls.clear()

    controller.resync()
    _drain(controller)
    assert sorted(rec.calls) == ["a", "b"]


def test_reconciler_crash_does_not_stop_processing():
    store = MemoryStore()

    class Boom:
        def __init__(self): self.calls = []
        def reconcile(self, name):
            self.calls.append(name)
            raise RuntimeError("boom")

    rec = Boom()
    controller = Controller(rec, store)
    store.create(_app("a"))
    store.create(_app("b"))
    _drain(controller)
    assert rec.calls == ["a", "b"]


def test_run_converges_and_finalizes_apps():
    store = MemoryStore([
        {"kind": "Pool", "metadata": {"name": "gold"}, "spec": {"namespace": "gold-ns", "appQuotaLimit": 1}},
    ])
    storage = Storage(store, "shipyard-system")
    ensure_default_templates(storage)
    helm = FakeHelm()
    controller = Controller(
        AppReconciler(store, PoolRegistry(store), storage, helm),
        store,
        workers=2,
        resync_seconds=0.05,
    )
    stop = threading.Event()
    runner = threading.Thread(target=controller.run, args=(stop,))
    runner.start()
    try:
        store.create(_app("first"))
        store.create(_app("second"))

        def phases():
            return {
                o["metadata"]["name"]: App.model_validate(o).status.phase
                for o in store.list("App")
            }

        deadline = time.time() + 5
        while time.time() < deadline and None in phases().values():
            time.sleep(0.02)
        assert sorted(phases().values()) == [AppPhase.FAILED, AppPhase.RUNNING]

        running = next(n for n, p in phases().items() if p == AppPhase.RUNNING)
        store.delete("App", running)
        while time.time() < deadline and running in phases():
            time.sleep(0.02)
        assert running not in phases()
        assert helm.deleted == [running]
    finally:
        stop.set()
        runner.join(timeout=5)
    assert not runner.is_alive()
