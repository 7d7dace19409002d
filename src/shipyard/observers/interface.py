# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/observers/interface.py
from __future__ import annotations
from typing import Protocol, runtime_checkable
from .events import BaseEvent


@runtime_checkable
class Observer(Protocol):
    """
    Receives every reconcile event of a controller run.

    notify() is called from worker threads, possibly concurrently for
    different apps, and must not block for long.
    """

    def notify(self, event: BaseEvent) -> None: ...
