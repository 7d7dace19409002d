# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shipyard/utils/retry.py
import time
import functools
from typing import Callable


class RetryError(RuntimeError):
    """An operation kept failing with a retryable error until attempts ran out."""

    def __init__(self, operation: str, attempts: int, last_error: Exception):
        super().__init__(f"{operation} gave up after {attempts} attempts: {last_error}")
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


def retry(
    *,
    retries: int,
    delay: float = 0,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, Exception], None] | None = None,
):
    """
    Re-run a read-modify-write that lost a race.

    retries: total attempts, the first one included
    delay: seconds to sleep between attempts, 0 retries immediately
    retry_on: errors worth another attempt; anything else propagates at once
    on_retry: callback(attempt, exception), called for every failed attempt

    When the last attempt fails, RetryError is raised from that error.
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            for attempt in range(1, retries + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    if on_retry:
                        on_retry(attempt, exc)
                    if attempt == retries:
                        raise RetryError(fn.__name__, retries, exc) from exc
                    if delay:
                        time.sleep(delay)
        return wrapper
    return decorator
