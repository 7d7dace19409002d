# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/store/errors.py
class StoreError(RuntimeError):
    """Base class for object store failures."""


class NotFoundError(StoreError):
    """Raised when an object does not exist."""

    def __init__(self, kind: str, name: str):
        super().__init__(f'{kind.lower()} "{name}" not found')
        self.kind = kind
        self.name = name


class AlreadyExistsError(StoreError):
    """Raised when creating an object that already exists."""

    def __init__(self, kind: str, name: str):
        super().__init__(f'{kind.lower()} "{name}" already exists')
        self.kind = kind
        self.name = name


class ConflictError(StoreError):
    """Raised when an update carries a stale resourceVersion."""
