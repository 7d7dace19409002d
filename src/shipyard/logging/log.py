# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/logging/log.py

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

# worker threads reconcile in parallel, so every line names its thread
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(threadName)s | %(message)s"


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "shipyard",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path]:
    """
    Set up the "shipyard" logger for one controller invocation.

    Every record goes to ~/.shipyard/logs/<name>-<utc time>-<run id>.log at
    DEBUG, including reconcile tracebacks. The console gets INFO, or DEBUG
    with verbose=True. Calling it again replaces the handlers, it never
    stacks them.

    Returns (logger, run_id, log_path). The CLI prints run_id and log_path
    in its start banner.
    """
    run_id = uuid.uuid4().hex[:12]

    if base_dir is None:
        base_dir = Path.home() / ".shipyard" / "logs"
    base_dir.mkdir(parents=True, exist_ok=True)

    started = datetime.now(timezone.utc)
    log_path = base_dir / f"{name}-{started:%Y%m%d-%H%M%S}-{run_id}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    logger.debug("controller run %s logging to %s", run_id, log_path)
    return logger, run_id, log_path
