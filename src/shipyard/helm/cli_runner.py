# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/helm/cli_runner.py
from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from typing import List, Optional

from .errors import HelmError
from .interface import IHelm
from ..chart.application import ApplicationChart, ChartConfig

log = logging.getLogger("shipyard")


class HelmCliRunner(IHelm):
    """
    A pragmatic wrapper around the `helm` CLI.
    - One release per app, named after the app, in its pool's namespace.
    - Testable by mocking subprocess.run.
    """

    def __init__(
        self,
        kube_context: str | None = None,
        timeout_seconds: int = 300,
        debug: bool = False,
        env: dict[str, str] | None = None,
    ):
        self.kube_context = kube_context
        self.timeout_seconds = timeout_seconds
        self.debug = debug
        self.env = env or {}

    # ------------------------- internal helpers -------------------------

    def _base(self) -> list[str]:
        cmd = ["helm"]
        if self.kube_context:
            cmd += ["--kube-context", self.kube_context]
        return cmd

    def _run(self, argv: List[str]) -> subprocess.CompletedProcess:
        log.debug("running %s", " ".join(argv))
        cp = subprocess.run(
            argv,
            check=False,
            text=True,
            capture_output=True,
            env=self.env or None,
        )
        if cp.returncode != 0:
            stderr = (getattr(cp, "stderr", "") or "").strip()
            raise HelmError(
                stderr or f"helm exited with rc={cp.returncode}",
                argv=argv,
                returncode=cp.returncode,
            )
        return cp

    def _find_release_namespace(self, release_name: str) -> Optional[str]:
        argv = self._base() + [
            "list", "--all-namespaces", "--all",
            "--filter", f"^{release_name}$",
            "--output", "json",
        ]
        cp = self._run(argv)
        releases = json.loads(cp.stdout or "[]")
        for rel in releases:
            if rel.get("name") == release_name:
                return rel.get("namespace")
        return None

    # ------------------------- IHelm methods -------------------------

    def update_chart(self, app_chart: ApplicationChart, config: ChartConfig) -> None:
        with tempfile.TemporaryDirectory(prefix="shipyard-chart-") as tmp:
            chart_dir = app_chart.export_to_directory(tmp, config)
            argv = (
                self._base()
                + ["upgrade", "--install", app_chart.app_name, str(chart_dir)]
                + ["-n", app_chart.namespace, "--create-namespace"]
                + ["--wait", "--timeout", f"{self.timeout_seconds}s"]
            )
            if self.debug:
                argv.append("--debug")
            self._run(argv)
        log.info("helm release %s updated in %s", app_chart.app_name, app_chart.namespace)

    def delete_chart(self, app_name: str) -> None:
        namespace = self._find_release_namespace(app_name)
        if namespace is None:
            log.debug("helm release %s not found, nothing to delete", app_name)
            return
        argv = self._base() + ["uninstall", app_name, "-n", namespace]
        if self.debug:
            argv.append("--debug")
        self._run(argv)
        log.info("helm release %s uninstalled from %s", app_name, namespace)
