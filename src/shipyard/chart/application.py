# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/chart/application.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..config.models import App, Pool
from ..templates.storage import Templates


@dataclass
class ChartConfig:
    version: str = "0.0.1"
    app_version: str = "0.0.1"
    description: str = "Shipyard application chart"

    def chart_yaml(self, name: str) -> Dict[str, Any]:
        return {
            "apiVersion": "v2",
            "name": name,
            "description": self.description,
            "type": "application",
            "version": self.version,
            "appVersion": self.app_version,
        }


@dataclass
class ApplicationChart:
    """Everything the deployment engine needs to render one app's chart."""

    app_name: str
    namespace: str
    pool: str
    deployments: List[Dict[str, Any]] = field(default_factory=list)
    templates: Templates = field(default_factory=Templates)

    @classmethod
    def new(cls, app: App, pool: Pool, templates: Templates) -> "ApplicationChart":
        return cls(
            app_name=app.name,
            namespace=pool.spec.namespace,
            pool=pool.name,
            deployments=[dict(d) for d in app.spec.deployments],
            templates=templates,
        )

    def values(self) -> Dict[str, Any]:
        return {
            "app": {
                "name": self.app_name,
                "pool": self.pool,
                "deployments": self.deployments,
            }
        }

    def export_to_directory(self, directory: str | Path, config: ChartConfig) -> Path:
        """
        Write a complete helm chart (Chart.yaml, values.yaml, templates/)
        into directory and return the chart path.
        """
        chart_dir = Path(directory) / self.app_name
        chart_dir.mkdir(parents=True, exist_ok=True)
        (chart_dir / "Chart.yaml").write_text(
            yaml.safe_dump(config.chart_yaml(self.app_name), sort_keys=False),
            encoding="utf-8",
        )
        (chart_dir / "values.yaml").write_text(
            yaml.safe_dump(self.values(), sort_keys=False),
            encoding="utf-8",
        )
        self.templates.export_to_directory(chart_dir / "templates")
        return chart_dir
