# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/store/memory.py
from __future__ import annotations

import copy
import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Tuple

from .errors import AlreadyExistsError, ConflictError, NotFoundError
from .interface import ADDED, DELETED, MODIFIED, Handler, ObjectStore

log = logging.getLogger("shipyard")


def _kind_name(obj: Dict) -> Tuple[str, str]:
    kind = obj.get("kind")
    name = (obj.get("metadata") or {}).get("name")
    if not kind or not name:
        raise ValueError("object must have 'kind' and 'metadata.name'")
    return kind, name


class MemoryStore(ObjectStore):
    """
    Thread-safe in-memory object store with Kubernetes-like semantics:

    - every write bumps ``metadata.resourceVersion``
    - ``metadata.generation`` only moves when ``spec`` or ``deletionTimestamp`` changes
    - deleting an object that carries finalizers only marks it for deletion;
      it is purged once an update clears its finalizers
    """

    def __init__(self, objects: List[Dict] | None = None):
        self._lock = threading.RLock()
        self._objects: Dict[Tuple[str, str], Dict] = {}
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._version = 0
        for obj in objects or []:
            self.create(obj)

    # ------------------------- internal helpers -------------------------

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _notify(self, event_type: str, obj: Dict) -> None:
        for handler in list(self._handlers.get(obj["kind"], [])):
            try:
                handler(event_type, copy.deepcopy(obj))
            except Exception:
                log.exception("store handler failed for %s %s", obj["kind"], obj["metadata"]["name"])

    # ------------------------- ObjectStore methods -------------------------

    def get(self, kind: str, name: str) -> Dict:
        with self._lock:
            obj = self._objects.get((kind, name))
            if obj is None:
                raise NotFoundError(kind, name)
            return copy.deepcopy(obj)

    def list(self, kind: str) -> List[Dict]:
        with self._lock:
            return [
                copy.deepcopy(obj)
                for (k, _), obj in sorted(self._objects.items())
                if k == kind
            ]

    def create(self, obj: Dict) -> Dict:
        kind, name = _kind_name(obj)
        with self._lock:
            if (kind, name) in self._objects:
                raise AlreadyExistsError(kind, name)
            stored = copy.deepcopy(obj)
            meta = stored.setdefault("metadata", {})
            meta["resourceVersion"] = self._next_version()
            meta["generation"] = 1
            meta.setdefault("finalizers", [])
            meta.pop("deletionTimestamp", None)
            self._objects[(kind, name)] = stored
            result = copy.deepcopy(stored)
        self._notify(ADDED, result)
        return result

    def update(self, obj: Dict) -> Dict:
        kind, name = _kind_name(obj)
        with self._lock:
            current = self._objects.get((kind, name))
            if current is None:
                raise NotFoundError(kind, name)
            cur_meta = current["metadata"]
            wanted = obj["metadata"].get("resourceVersion")
            if wanted and wanted != cur_meta["resourceVersion"]:
                raise ConflictError(
                    f'{kind.lower()} "{name}" was modified: '
                    f'resourceVersion {wanted} != {cur_meta["resourceVersion"]}'
                )

            stored = copy.deepcopy(obj)
            meta = stored["metadata"]
            # deletionTimestamp can only be set through delete()
            if cur_meta.get("deletionTimestamp"):
                meta["deletionTimestamp"] = cur_meta["deletionTimestamp"]
            else:
                meta.pop("deletionTimestamp", None)
            meta.setdefault("finalizers", [])
            meta["generation"] = cur_meta["generation"]
            if stored.get("spec") != current.get("spec"):
                meta["generation"] += 1
            meta["resourceVersion"] = self._next_version()

            if meta.get("deletionTimestamp") and not meta["finalizers"]:
                del self._objects[(kind, name)]
                event_type = DELETED
            else:
                self._objects[(kind, name)] = stored
                event_type = MODIFIED
            result = copy.deepcopy(stored)
        self._notify(event_type, result)
        return result

    def delete(self, kind: str, name: str) -> None:
        with self._lock:
            current = self._objects.get((kind, name))
            if current is None:
                raise NotFoundError(kind, name)
            meta = current["metadata"]
            if meta.get("finalizers"):
                if meta.get("deletionTimestamp"):
                    return
                meta["deletionTimestamp"] = datetime.utcnow().isoformat(timespec="seconds") + "Z"
                meta["generation"] += 1
                meta["resourceVersion"] = self._next_version()
                event_type = MODIFIED
            else:
                del self._objects[(kind, name)]
                event_type = DELETED
            result = copy.deepcopy(current)
        self._notify(event_type, result)

    def subscribe(self, kind: str, handler: Handler) -> None:
        with self._lock:
            self._handlers[kind].append(handler)
