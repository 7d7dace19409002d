# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/store/interface.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, List

# handler(event_type, obj) where event_type is ADDED / MODIFIED / DELETED
Handler = Callable[[str, Dict], None]

ADDED = "ADDED"
MODIFIED = "MODIFIED"
DELETED = "DELETED"


class ObjectStore(ABC):
    """
    Minimal cluster-like object store.

    Objects are plain dicts shaped like Kubernetes resources:
    ``{"apiVersion", "kind", "metadata": {"name", "resourceVersion", ...}, ...}``.
    """

    @abstractmethod
    def get(self, kind: str, name: str) -> Dict: ...

    @abstractmethod
    def list(self, kind: str) -> List[Dict]: ...

    @abstractmethod
    def create(self, obj: Dict) -> Dict: ...

    @abstractmethod
    def update(self, obj: Dict) -> Dict:
        """
        Replace an object. When ``metadata.resourceVersion`` is set it must match
        the stored one, otherwise ConflictError is raised.
        """

    @abstractmethod
    def delete(self, kind: str, name: str) -> None: ...

    def subscribe(self, kind: str, handler: Handler) -> None:
        """
        Register a change handler. Stores without change notifications keep
        this no-op and callers fall back to periodic resync.
        """
        return None
