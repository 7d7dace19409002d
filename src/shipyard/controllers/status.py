# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/controllers/status.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config.models import App, AppPhase, AppStatus
from ..store.errors import ConflictError, NotFoundError
from ..store.interface import ObjectStore
from ..utils.retry import retry

log = logging.getLogger("shipyard")


@dataclass(frozen=True)
class ReconcileOutcome:
    phase: AppPhase
    message: str = ""


class StatusPublisher:
    """Writes a pass's outcome back to the App, replacing its whole status."""

    def __init__(self, store: ObjectStore):
        self.store = store

    @retry(retries=5, retry_on=(ConflictError,))
    def publish(self, name: str, outcome: ReconcileOutcome) -> bool:
        """Returns False when the app no longer exists."""
        try:
            app = App.model_validate(self.store.get("App", name))
        except NotFoundError:
            log.debug("app %s is gone, skipping status update", name)
            return False
        app.status = AppStatus(phase=outcome.phase, message=outcome.message)
        self.store.update(app.to_object())
        return True
