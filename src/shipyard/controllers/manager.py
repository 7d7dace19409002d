# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/controllers/manager.py
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from .app_controller import AppReconciler
from .workqueue import WorkQueue
from ..store.interface import ADDED, DELETED, ObjectStore

log = logging.getLogger("shipyard")


class Controller:
    """
    Feeds App names from store notifications and periodic resync into a
    WorkQueue, and drains it with a pool of worker threads.
    """

    def __init__(
        self,
        reconciler: AppReconciler,
        store: ObjectStore,
        *,
        workers: int = 4,
        resync_seconds: float = 30.0,
    ):
        self.reconciler = reconciler
        self.store = store
        self.workers = workers
        self.resync_seconds = resync_seconds
        self.queue = WorkQueue()
        self._generations: Dict[str, int] = {}
        self._generations_lock = threading.Lock()
        store.subscribe("App", self._on_event)

    def _on_event(self, event_type: str, obj: Dict) -> None:
        meta = obj.get("metadata") or {}
        name = meta.get("name")
        if not name:
            return
        generation = meta.get("generation", 0)
        with self._generations_lock:
            if event_type == DELETED:
                self._generations.pop(name, None)
                changed = True
            else:
                changed = event_type == ADDED or self._generations.get(name) != generation
                self._generations[name] = generation
        # status-only writes keep the generation and are ignored
        if changed:
            self.enqueue(name)

    def enqueue(self, name: str) -> None:
        self.queue.add(name)

    def resync(self) -> None:
        apps = self.store.list("App")
        log.debug("resync: %d apps", len(apps))
        for obj in apps:
            self.enqueue(obj["metadata"]["name"])

    def process_next(self, timeout: Optional[float] = None) -> bool:
        """Reconcile one queued app. Returns False if nothing was dequeued."""
        key = self.queue.get(timeout)
        if key is None:
            return False
        try:
            self.reconciler.reconcile(key)
        except Exception:
            log.exception("unhandled error reconciling app %s", key)
        finally:
            self.queue.done(key)
        return True

    def _worker(self, stop: threading.Event) -> None:
        while not stop.is_set() and not self.queue.shutting_down:
            self.process_next(timeout=0.5)

    def run(self, stop: threading.Event) -> None:
        """Block until stop is set."""
        threads: List[threading.Thread] = [
            threading.Thread(target=self._worker, args=(stop,), name=f"shipyard-worker-{i}", daemon=True)
            for i in range(self.workers)
        ]
        for t in threads:
            t.start()
        log.info("controller started with %d workers, resync every %ss", self.workers, self.resync_seconds)

        self.resync()
        while not stop.wait(self.resync_seconds):
            try:
                self.resync()
            except Exception:
                log.exception("resync failed")

        self.queue.shutdown()
        for t in threads:
            t.join()
        log.info("controller stopped")
