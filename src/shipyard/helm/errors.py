# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/helm/errors.py
from typing import List, Optional


class HelmError(RuntimeError):
    """
    A helm invocation exited non-zero.

    str() is helm's own stderr, which ends up in the App status message.
    """

    def __init__(self, message: str, *, argv: Optional[List[str]] = None, returncode: Optional[int] = None):
        super().__init__(message)
        self.argv = argv or []
        self.returncode = returncode
