# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/controllers/app_controller.py
from __future__ import annotations

import logging
import time
from typing import List, Optional

from .status import ReconcileOutcome, StatusPublisher
from ..chart.application import ApplicationChart, ChartConfig
from ..config.models import App, AppPhase, Pool
from ..helm.interface import IHelm
from ..pools.registry import PoolRegistry
from ..store.errors import ConflictError, NotFoundError
from ..store.interface import ObjectStore
from ..templates.storage import DEFAULT_TEMPLATES_NAME, Reader
from ..utils.retry import RetryError, retry

# Observer bits
from ..observers.dispatcher import EventBus
from ..observers.events import (
    new_ctx,
    ReconcileStarted,
    PoolReserved,
    QuotaExceeded,
    PoolReleased,
    ChartUpdated,
    ChartUpdateFailed,
    ChartDeleted,
    StatusPublished,
)

log = logging.getLogger("shipyard")

FINALIZER = "shipyard.io/app-finalizer"

QUOTA_EXCEEDED_MESSAGE = "you have reached the limit of apps"


def pool_not_found_message(pool_name: str) -> str:
    return f'pool "{pool_name}" is not found'


def _error_text(e: Exception) -> str:
    # retry exhaustion reports the last underlying error, not the helper name
    if isinstance(e, RetryError):
        return str(e.last_error)
    return str(e)


def step_failed(step: str, e: Exception) -> ReconcileOutcome:
    """
    Outcome for a collaborator error in one step. Write conflicts that
    outlasted their retries are transient and leave the app Pending.
    """
    phase = AppPhase.PENDING if isinstance(e, (ConflictError, RetryError)) else AppPhase.FAILED
    return ReconcileOutcome(phase, f"{step}: {_error_text(e)}")


class AppReconciler:
    """
    Converges one App per call to reconcile().

    The caller guarantees a single pass per app name at a time; passes for
    different apps may run concurrently and only meet in the PoolRegistry.
    """

    def __init__(
        self,
        store: ObjectStore,
        pools: PoolRegistry,
        templates: Reader,
        helm: IHelm,
        *,
        chart_config: Optional[ChartConfig] = None,
        observers: Optional[List] = None,
    ):
        self.store = store
        self.pools = pools
        self.templates = templates
        self.helm = helm
        self.chart_config = chart_config or ChartConfig()
        self.status = StatusPublisher(store)
        self.bus = EventBus(observers or [])

    # ------------------------- finalizer helpers -------------------------

    @retry(retries=5, retry_on=(ConflictError,))
    def _add_finalizer(self, name: str) -> App:
        app = App.model_validate(self.store.get("App", name))
        if FINALIZER not in app.metadata.finalizers:
            app.metadata.finalizers.append(FINALIZER)
            app = App.model_validate(self.store.update(app.to_object()))
        return app

    @retry(retries=5, retry_on=(ConflictError,))
    def _remove_finalizer(self, name: str) -> None:
        try:
            app = App.model_validate(self.store.get("App", name))
        except NotFoundError:
            return
        if FINALIZER in app.metadata.finalizers:
            app.metadata.finalizers = [f for f in app.metadata.finalizers if f != FINALIZER]
            try:
                self.store.update(app.to_object())
            except NotFoundError:
                # purged as soon as the last finalizer went away
                pass

    # ------------------------- reconciliation -------------------------

    def reconcile(self, name: str) -> Optional[ReconcileOutcome]:
        """
        Run one pass for the app. Returns the published outcome, or None when
        the app is gone or being deleted (no status is written then).
        """
        try:
            app = App.model_validate(self.store.get("App", name))
        except NotFoundError:
            log.debug("app %s not found, nothing to reconcile", name)
            return None

        ctx = new_ctx(app=name)
        self.bus.emit(ReconcileStarted(deleting=app.deletion_requested, **ctx))

        if app.deletion_requested:
            if FINALIZER in app.metadata.finalizers:
                self._finalize(app, ctx)
            return None

        try:
            app = self._add_finalizer(name)
            outcome = self._converge(app, ctx)
        except NotFoundError:
            # deleted and purged while we were working on it
            log.debug("app %s disappeared during reconciliation", name)
            return None
        except Exception as e:
            log.exception("reconciling app %s failed", name)
            outcome = step_failed("failed to reconcile app", e)

        if self.status.publish(name, outcome):
            self.bus.emit(StatusPublished(phase=outcome.phase.value, message=outcome.message, **ctx))
            log.info("app %s: phase=%s %s", name, outcome.phase.value, outcome.message)
        return outcome

    def _converge(self, app: App, ctx: dict) -> ReconcileOutcome:
        try:
            pool = self.pools.resolve(app.spec.pool)
        except Exception as e:
            log.warning("looking up pool %s for app %s failed: %s", app.spec.pool, app.name, e)
            return step_failed(f'failed to look up pool "{app.spec.pool}"', e)
        if pool is None:
            return ReconcileOutcome(AppPhase.FAILED, pool_not_found_message(app.spec.pool))

        outcome = self._reserve(app, pool, ctx)
        if outcome is not None:
            return outcome

        key = app.spec.chart.templates_key or DEFAULT_TEMPLATES_NAME
        try:
            templates = self.templates.get(key)
        except Exception as e:
            return ReconcileOutcome(
                AppPhase.FAILED,
                f"failed to read configmap with the app's chart templates: {e}",
            )

        app_chart = ApplicationChart.new(app, pool, templates)
        try:
            t0 = time.time()
            self.helm.update_chart(app_chart, self.chart_config)
        except Exception as e:
            self.bus.emit(ChartUpdateFailed(namespace=app_chart.namespace, error=str(e), **ctx))
            return ReconcileOutcome(AppPhase.PENDING, f"failed to update helm chart: {e}")
        duration_ms = int((time.time() - t0) * 1000)
        self.bus.emit(ChartUpdated(namespace=app_chart.namespace, duration_ms=duration_ms, **ctx))

        return ReconcileOutcome(AppPhase.RUNNING, "")

    def _reserve(self, app: App, pool: Pool, ctx: dict) -> Optional[ReconcileOutcome]:
        step = f'failed to reserve a slot in pool "{pool.name}"'
        try:
            reserved = self.pools.try_reserve(pool.name, app.name)
        except NotFoundError:
            return ReconcileOutcome(AppPhase.FAILED, pool_not_found_message(pool.name))
        except Exception as e:
            log.warning("reserving a slot in pool %s for app %s failed: %s", pool.name, app.name, e)
            return step_failed(step, e)
        if not reserved:
            self.bus.emit(QuotaExceeded(pool=pool.name, limit=pool.spec.app_quota_limit, **ctx))
            return ReconcileOutcome(AppPhase.FAILED, QUOTA_EXCEEDED_MESSAGE)
        self.bus.emit(PoolReserved(pool=pool.name, **ctx))

        # the app moved here from another pool
        try:
            self.pools.release_all(app.name, keep=pool.name)
        except Exception as e:
            log.warning("releasing old pool slots of app %s failed: %s", app.name, e)
            return step_failed(step, e)
        return None

    def _finalize(self, app: App, ctx: dict) -> None:
        """Tear down the chart, free the pool slot, drop the finalizer. Never raises."""
        try:
            self.helm.delete_chart(app.name)
            self.bus.emit(ChartDeleted(**ctx))
        except Exception as e:
            log.warning("deleting helm chart of app %s failed: %s", app.name, e)
            self.bus.emit(ChartDeleted(error=str(e), **ctx))

        try:
            self.pools.release_all(app.name)
            self.bus.emit(PoolReleased(pool=app.spec.pool, **ctx))
        except Exception:
            log.exception("releasing pool slot of app %s failed", app.name)

        try:
            self._remove_finalizer(app.name)
        except Exception:
            log.exception("removing finalizer of app %s failed", app.name)
        log.info("app %s finalized", app.name)
