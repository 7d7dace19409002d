# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from datetime import datetime
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one reconciliation pass
    app: str          # app being reconciled

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(app: str) -> Dict[str, Any]:
    return {
        "ts": datetime.utcnow().isoformat(timespec="seconds") + "Z",
        "run_id": str(uuid.uuid4()),
        "app": app,
    }


# ---------------------------------------------------------------------
# Reconciliation pass
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ReconcileStarted(BaseEvent):
    deleting: bool

@dataclass(frozen=True)
class StatusPublished(BaseEvent):
    phase: str
    message: str


# ---------------------------------------------------------------------
# Pool slots
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class PoolReserved(BaseEvent):
    pool: str

@dataclass(frozen=True)
class QuotaExceeded(BaseEvent):
    pool: str
    limit: int

@dataclass(frozen=True)
class PoolReleased(BaseEvent):
    pool: Optional[str]


# ---------------------------------------------------------------------
# Chart lifecycle (Helm)
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ChartUpdated(BaseEvent):
    namespace: str
    duration_ms: int

@dataclass(frozen=True)
class ChartUpdateFailed(BaseEvent):
    namespace: str
    error: str

@dataclass(frozen=True)
class ChartDeleted(BaseEvent):
    error: Optional[str] = None
