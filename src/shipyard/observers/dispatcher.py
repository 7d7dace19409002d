# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/observers/dispatcher.py
from __future__ import annotations
import logging
from typing import Iterable, List, Optional
from .events import BaseEvent
from .interface import Observer

log = logging.getLogger("shipyard")


class EventBus:
    """Fans reconcile events out to observers. A failing observer never fails the pass."""

    def __init__(self, observers: Optional[Iterable[Observer]] = None):
        self._observers: List[Observer] = []
        for ob in observers or []:
            if not isinstance(ob, Observer):
                raise TypeError(f"{ob!r} has no notify(event) method")
            self._observers.append(ob)

    def emit(self, event: BaseEvent) -> None:
        for ob in self._observers:
            try:
                ob.notify(event)
            except Exception:
                log.warning(
                    "observer %s failed on %s for app %s",
                    ob.__class__.__name__, event.__class__.__name__, event.app,
                    exc_info=True,
                )
