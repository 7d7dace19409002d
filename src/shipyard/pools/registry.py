# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/pools/registry.py
from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from ..config.models import Pool
from ..store.errors import ConflictError, NotFoundError
from ..store.interface import ObjectStore
from ..utils.retry import retry

log = logging.getLogger("shipyard")

# attempts for a compare-and-swap write racing with another writer
CAS_RETRIES = 5


def _log_conflict(attempt: int, exc: Exception) -> None:
    log.debug("pool write conflict (attempt %d): %s", attempt, exc)


class PoolRegistry:
    """
    Pool lookup plus slot reservation.

    Occupancy lives in ``Pool.status.apps``. Writes to one pool are serialized
    by a per-pool lock and committed with a resourceVersion compare-and-swap,
    so registries sharing a store cannot over-admit either.
    """

    def __init__(self, store: ObjectStore):
        self.store = store
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, pool_name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(pool_name)
            if lock is None:
                lock = self._locks[pool_name] = threading.Lock()
            return lock

    def _save(self, pool: Pool) -> None:
        self.store.update(pool.to_object())

    # ------------------------- lookups -------------------------

    def resolve(self, pool_name: str) -> Optional[Pool]:
        try:
            return Pool.model_validate(self.store.get("Pool", pool_name))
        except NotFoundError:
            return None

    def occupancy(self, pool_name: str) -> int:
        pool = self.resolve(pool_name)
        return len(pool.status.apps) if pool else 0

    # ------------------------- reservations -------------------------

    def try_reserve(self, pool_name: str, app_name: str) -> bool:
        """
        Reserve a slot for app_name. Returns False when the pool is full.
        Re-reserving a slot the app already holds succeeds without counting twice.
        Raises NotFoundError if the pool does not exist.
        """
        with self._lock_for(pool_name):
            return self._reserve(pool_name, app_name)

    @retry(retries=CAS_RETRIES, retry_on=(ConflictError,), on_retry=_log_conflict)
    def _reserve(self, pool_name: str, app_name: str) -> bool:
        pool = Pool.model_validate(self.store.get("Pool", pool_name))
        if pool.has_app(app_name):
            return True
        if len(pool.status.apps) >= pool.spec.app_quota_limit:
            log.debug("pool %s is full (%d apps)", pool_name, pool.spec.app_quota_limit)
            return False
        pool.status.apps = sorted(pool.status.apps + [app_name])
        self._save(pool)
        log.debug("app %s reserved a slot in pool %s", app_name, pool_name)
        return True

    def release(self, pool_name: str, app_name: str) -> None:
        """Release app_name's slot. Missing pools and unheld slots are no-ops."""
        with self._lock_for(pool_name):
            self._release(pool_name, app_name)

    @retry(retries=CAS_RETRIES, retry_on=(ConflictError,), on_retry=_log_conflict)
    def _release(self, pool_name: str, app_name: str) -> None:
        pool = self.resolve(pool_name)
        if pool is None or not pool.has_app(app_name):
            return
        pool.status.apps = [a for a in pool.status.apps if a != app_name]
        self._save(pool)
        log.debug("app %s released its slot in pool %s", app_name, pool_name)

    def release_all(self, app_name: str, keep: Optional[str] = None) -> None:
        """Release app_name from every pool except keep."""
        for obj in self.store.list("Pool"):
            name = obj["metadata"]["name"]
            if name != keep and app_name in (obj.get("status") or {}).get("apps", []):
                self.release(name, app_name)
