"""
Whole-run retry for the archiving workflow.

A run (logon, organization lookup and every task) either completes or is
started over from logon. Individual HTTP calls are not retried: any error
that escapes the run is treated as transient, the decorated function is
invoked again after a fixed pause, and after the last attempt the error is
re-raised to the caller.

USAGE:
------
    from utils.retry import retry_on_error

    @retry_on_error(max_attempts=3, delay=1.0)
    def run():
        client.logon(credentials)
        for task in tasks:
            run_task(client, task)
"""

import time
from functools import wraps
from typing import Callable, Optional

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY = 1.0


def retry_on_error(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
    on_retry: Optional[Callable[[Exception, int, float], None]] = None,
    sleep: Optional[Callable[[float], None]] = None,
):
    """
    Decorator that re-runs a function when it raises.

    Args:
        max_attempts: Total number of attempts, including the first one.
        delay: Seconds to wait before each new attempt. The pause is the
               same for every attempt.
        on_retry: Optional callback called before each retry with the
                  exception, the failed attempt number (1-indexed) and the
                  delay.
        sleep: Function used to wait; defaults to time.sleep.

    Returns:
        A decorator that wraps functions with retry logic.

    Raises:
        The last exception encountered once all attempts are used up.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    if attempt == max_attempts:
                        raise
                    if on_retry:
                        on_retry(exc, attempt, delay)
                    (sleep or time.sleep)(delay)

        return wrapper
    return decorator
