# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/helm/interface.py
from __future__ import annotations

from typing import Protocol

from ..chart.application import ApplicationChart, ChartConfig


class IHelm(Protocol):
    def update_chart(self, app_chart: ApplicationChart, config: ChartConfig) -> None:
        """Install or upgrade the app's release. Raises on failure."""
        ...

    def delete_chart(self, app_name: str) -> None:
        """Uninstall the app's release. A missing release is not an error."""
        ...
