# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/templates/storage.py
"""
Load and store an application's helm chart templates.

A template set is stored as a ConfigMap whose data maps each file of the
chart's ``templates/`` folder to its content::

    apiVersion: v1
    kind: ConfigMap
    metadata:
      name: <name>
      namespace: shipyard-system
    data:
      service.yaml: |-
        ..
      deployment.yaml: |-
        ..
"""
from __future__ import annotations

import hashlib
import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Protocol

from ..store.errors import NotFoundError
from ..store.interface import ObjectStore
from .defaults import DEFAULT_YAMLS

log = logging.getLogger("shipyard")

# name of the template set every app uses unless it overrides it
DEFAULT_TEMPLATES_NAME = "templates-default"


@dataclass
class Templates:
    # content of each yaml file in a helm chart's "templates/" folder
    yamls: Dict[str, str] = field(default_factory=dict)

    def to_configmap(self, name: str, namespace: str) -> Dict:
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {"name": name, "namespace": namespace},
            "data": dict(self.yamls),
        }

    def export_to_directory(self, directory: str | Path) -> None:
        """
        Save the templates to the directory, one file per entry.
        Whatever was at that path before, directory or file, is removed.
        """
        directory = Path(directory)
        if directory.is_dir() and not directory.is_symlink():
            shutil.rmtree(directory)
        elif directory.exists() or directory.is_symlink():
            directory.unlink()
        directory.mkdir(parents=True)
        for filename, content in self.yamls.items():
            (directory / filename).write_text(content, encoding="utf-8")


DEFAULT_TEMPLATES = Templates(yamls=dict(DEFAULT_YAMLS))


def read_directory(directory: str | Path) -> Templates:
    """Read every regular file in the directory into a Templates instance."""
    directory = Path(directory)
    yamls: Dict[str, str] = {}
    for entry in sorted(directory.iterdir()):
        if not entry.is_dir():
            yamls[entry.name] = entry.read_text(encoding="utf-8")
    return Templates(yamls=yamls)


def app_templates_name(app_name: str) -> str:
    """Return a unique name for a template set owned by a single app."""
    seed = f"app-{app_name}-templates-{datetime.now().isoformat()}"
    digest = hashlib.sha256(seed.encode()).hexdigest()
    return f"app-{app_name}-templates-{digest[:16]}"


class Reader(Protocol):
    def get(self, name: str) -> Templates: ...


class Updater(Protocol):
    def update(self, name: str, templates: Templates) -> None: ...

    def delete(self, name: str) -> None: ...


class Storage:
    """Template sets persisted as ConfigMaps in an ObjectStore."""

    def __init__(self, store: ObjectStore, namespace: str):
        self.store = store
        self.namespace = namespace

    def get(self, name: str) -> Templates:
        cm = self.store.get("ConfigMap", name)
        return Templates(yamls=dict(cm.get("data") or {}))

    def update(self, name: str, templates: Templates) -> None:
        """Create the ConfigMap or fully replace its data."""
        cm = templates.to_configmap(name, self.namespace)
        try:
            current = self.store.get("ConfigMap", name)
        except NotFoundError:
            self.store.create(cm)
            return
        cm["metadata"] = {**current["metadata"], **cm["metadata"]}
        self.store.update(cm)

    def delete(self, name: str) -> None:
        """Delete a ConfigMap. Deleting a missing one is not an error."""
        try:
            self.store.delete("ConfigMap", name)
        except NotFoundError:
            pass


def ensure_default_templates(storage: Storage) -> bool:
    """Write DEFAULT_TEMPLATES unless they are already stored. Returns True if written."""
    try:
        storage.get(DEFAULT_TEMPLATES_NAME)
        return False
    except NotFoundError:
        storage.update(DEFAULT_TEMPLATES_NAME, DEFAULT_TEMPLATES)
        log.info("created default templates %s", DEFAULT_TEMPLATES_NAME)
        return True
