# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/store/kube.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from .errors import AlreadyExistsError, ConflictError, NotFoundError
from .interface import ObjectStore

log = logging.getLogger("shipyard")

GROUP = "shipyard.io"
VERSION = "v1beta1"

# cluster-scoped custom resources
PLURALS = {
    "App": "apps",
    "Pool": "pools",
}


def load_kube_clients(kube_context: Optional[str] = None):
    """Return (CustomObjectsApi, CoreV1Api), preferring in-cluster config."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config(context=kube_context)
    return client.CustomObjectsApi(), client.CoreV1Api()


class KubeStore(ObjectStore):
    """
    ObjectStore backed by a Kubernetes API server.

    App and Pool are cluster-scoped custom resources, ConfigMaps live in
    ``namespace``. There is no watch support; callers rely on resync.
    """

    def __init__(
        self,
        namespace: str,
        *,
        kube_context: Optional[str] = None,
        custom_api=None,
        core_api=None,
    ):
        self.namespace = namespace
        if custom_api is None or core_api is None:
            custom_api, core_api = load_kube_clients(kube_context)
        self.custom = custom_api
        self.core = core_api

    # ------------------------- internal helpers -------------------------

    def _plural(self, kind: str) -> str:
        try:
            return PLURALS[kind]
        except KeyError:
            raise ValueError(f"unsupported kind: {kind}") from None

    def _configmap_to_dict(self, cm) -> Dict:
        data = self.core.api_client.sanitize_for_serialization(cm)
        data.setdefault("apiVersion", "v1")
        data.setdefault("kind", "ConfigMap")
        data.setdefault("data", {})
        return data

    def _configmap_body(self, obj: Dict) -> Dict:
        body = dict(obj)
        body["apiVersion"] = "v1"
        body["kind"] = "ConfigMap"
        body["metadata"] = {**obj.get("metadata", {}), "namespace": self.namespace}
        return body

    def _custom_body(self, obj: Dict) -> Dict:
        body = dict(obj)
        body["apiVersion"] = f"{GROUP}/{VERSION}"
        return body

    # ------------------------- ObjectStore methods -------------------------

    def get(self, kind: str, name: str) -> Dict:
        try:
            if kind == "ConfigMap":
                cm = self.core.read_namespaced_config_map(name, self.namespace)
                return self._configmap_to_dict(cm)
            return self.custom.get_cluster_custom_object(GROUP, VERSION, self._plural(kind), name)
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(kind, name) from e
            raise

    def list(self, kind: str) -> List[Dict]:
        if kind == "ConfigMap":
            resp = self.core.list_namespaced_config_map(self.namespace)
            return [self._configmap_to_dict(cm) for cm in resp.items]
        resp = self.custom.list_cluster_custom_object(GROUP, VERSION, self._plural(kind))
        return list(resp.get("items", []))

    def create(self, obj: Dict) -> Dict:
        kind, name = obj["kind"], obj["metadata"]["name"]
        try:
            if kind == "ConfigMap":
                cm = self.core.create_namespaced_config_map(self.namespace, self._configmap_body(obj))
                return self._configmap_to_dict(cm)
            return self.custom.create_cluster_custom_object(
                GROUP, VERSION, self._plural(kind), self._custom_body(obj)
            )
        except ApiException as e:
            if e.status == 409:
                raise AlreadyExistsError(kind, name) from e
            raise

    def update(self, obj: Dict) -> Dict:
        kind, name = obj["kind"], obj["metadata"]["name"]
        try:
            if kind == "ConfigMap":
                cm = self.core.replace_namespaced_config_map(name, self.namespace, self._configmap_body(obj))
                return self._configmap_to_dict(cm)

            plural = self._plural(kind)
            body = self._custom_body(obj)
            result = self.custom.replace_cluster_custom_object(GROUP, VERSION, plural, name, body)
            meta = result.get("metadata") or {}
            if meta.get("deletionTimestamp") and not meta.get("finalizers"):
                # the last finalizer is gone and the server purged the object
                return result
            if "status" in obj:
                # status is a subresource and is ignored by a plain replace
                body["metadata"] = {
                    **body["metadata"],
                    "resourceVersion": result["metadata"]["resourceVersion"],
                }
                result = self.custom.replace_cluster_custom_object_status(GROUP, VERSION, plural, name, body)
            return result
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(kind, name) from e
            if e.status == 409:
                raise ConflictError(f'{kind.lower()} "{name}": {e.reason}') from e
            raise

    def delete(self, kind: str, name: str) -> None:
        try:
            if kind == "ConfigMap":
                self.core.delete_namespaced_config_map(name, self.namespace)
            else:
                self.custom.delete_cluster_custom_object(GROUP, VERSION, self._plural(kind), name)
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(kind, name) from e
            raise
