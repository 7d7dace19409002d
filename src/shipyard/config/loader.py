# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/config/loader.py

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List

import yaml
from pydantic import ValidationError

from .models import ControllerConfig

log = logging.getLogger("shipyard")


class ConfigError(ValueError):
    pass


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    try:
        raw = path.read_text()
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    expanded = os.path.expandvars(raw)
    try:
        data = yaml.safe_load(expanded) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top-level document must be a mapping")
    return data


def load_config(path: str | Path) -> ControllerConfig:
    """
    Load and validate the controller config.

    ``SHIPYARD_CONFIG_OVERRIDES`` may point at a second YAML file whose
    structure mirrors the config; it is deep-merged before validation.
    Relative manifest paths are resolved against the config file's directory.
    """
    path = Path(path)
    data = _load_yaml(path)

    overrides = os.environ.get("SHIPYARD_CONFIG_OVERRIDES")
    if overrides:
        p = Path(overrides)
        if p.is_file():
            log.debug("Merging overrides from %s", p)
            _deep_merge(data, _load_yaml(p))
        else:
            log.warning("SHIPYARD_CONFIG_OVERRIDES=%s does not exist, skipping", overrides)

    try:
        cfg = ControllerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}:\n{e}") from e

    cfg.manifests = [
        str(m if Path(m).is_absolute() else path.parent / m)
        for m in cfg.manifests
    ]
    return cfg


def _manifest_files(paths: Iterable[str | Path]) -> List[Path]:
    files: List[Path] = []
    for p in map(Path, paths):
        if p.is_dir():
            files += sorted(
                f for f in p.iterdir()
                if f.is_file() and f.suffix in (".yaml", ".yml")
            )
        else:
            files.append(p)
    return files


def load_manifests(paths: Iterable[str | Path]) -> List[Dict]:
    """
    Read multi-document YAML manifests (files or directories of *.yaml)
    and return the object dicts in file order.
    """
    objects: List[Dict] = []
    for f in _manifest_files(paths):
        try:
            docs = list(yaml.safe_load_all(os.path.expandvars(f.read_text())))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot load manifest {f}: {e}") from e
        for doc in docs:
            if not doc:
                continue
            if not isinstance(doc, dict) or not doc.get("kind") or not (doc.get("metadata") or {}).get("name"):
                raise ConfigError(f"{f}: every document needs 'kind' and 'metadata.name'")
            objects.append(doc)
        log.debug("loaded %d objects from %s", len(docs), f)
    return objects
