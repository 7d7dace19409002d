# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/config/models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

API_VERSION = "shipyard.io/v1beta1"


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_object(self) -> Dict[str, Any]:
        """Serialize to the plain dict shape stored in an ObjectStore."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class ObjectMeta(BaseModel):
    # keep uid, creationTimestamp, labels ... so replace() round-trips
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    resource_version: Optional[str] = Field(default=None, alias="resourceVersion")
    generation: int = 0
    finalizers: List[str] = Field(default_factory=list)
    deletion_timestamp: Optional[str] = Field(default=None, alias="deletionTimestamp")


# ---------------------------------------------------------------------
# App
# ---------------------------------------------------------------------
class AppPhase(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    FAILED = "Failed"


class ChartSpec(_Model):
    # name of the template set overriding the cluster defaults
    templates_key: Optional[str] = Field(default=None, alias="templatesKey")


class AppSpec(_Model):
    pool: str
    deployments: List[Dict[str, Any]] = Field(default_factory=list)
    chart: ChartSpec = Field(default_factory=ChartSpec)


class AppStatus(_Model):
    phase: Optional[AppPhase] = None
    message: str = ""


class App(_Model):
    api_version: str = Field(default=API_VERSION, alias="apiVersion")
    kind: Literal["App"] = "App"
    metadata: ObjectMeta
    spec: AppSpec
    status: AppStatus = Field(default_factory=AppStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def deletion_requested(self) -> bool:
        return self.metadata.deletion_timestamp is not None


# ---------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------
class PoolSpec(_Model):
    namespace: str
    app_quota_limit: int = Field(ge=0, alias="appQuotaLimit")


class PoolStatus(_Model):
    # names of the apps holding a slot in this pool
    apps: List[str] = Field(default_factory=list)


class Pool(_Model):
    api_version: str = Field(default=API_VERSION, alias="apiVersion")
    kind: Literal["Pool"] = "Pool"
    metadata: ObjectMeta
    spec: PoolSpec
    status: PoolStatus = Field(default_factory=PoolStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    def has_app(self, app_name: str) -> bool:
        return app_name in self.status.apps

    def available_slots(self) -> int:
        return max(self.spec.app_quota_limit - len(self.status.apps), 0)


# ---------------------------------------------------------------------
# Controller settings
# ---------------------------------------------------------------------
class HelmOptions(BaseModel):
    kube_context: Optional[str] = None
    timeout_seconds: int = 300
    debug: bool = False


class ControllerConfig(BaseModel):
    store: Literal["memory", "kubernetes"] = "memory"
    context: Optional[str] = None       # Kubernetes context to use
    namespace: str = "shipyard-system"  # where template ConfigMaps live
    manifests: List[str] = Field(default_factory=list)
    workers: int = Field(default=4, ge=1)
    resync_seconds: float = Field(default=30.0, gt=0)
    helm: HelmOptions = Field(default_factory=HelmOptions)
    events_file: Optional[str] = None
