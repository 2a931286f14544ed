"""Retry helper for network operations with exponential backoff."""

from __future__ import annotations

import logging
import time
from typing import Callable, Tuple, Type, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Supabase talks to PostgREST through httpx; these are the transient failures
RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    httpx.ConnectError,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.PoolTimeout,
    httpx.RemoteProtocolError,
    ConnectionError,
    TimeoutError,
)


def retry_on_network_error(
    func: Callable[[], T],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Retry a function on network/protocol errors with exponential backoff.

    Args:
        func: Callable to retry (should take no arguments)
        max_retries: Maximum number of attempts
        initial_delay: Initial delay in seconds (doubles each retry)
        sleep: Sleep function, replaceable in tests

    Returns:
        Function result

    Raises:
        Exception: Last exception if all retries fail, or any non-network
            exception immediately

    Example:
        result = retry_on_network_error(
            lambda: client.table("profiles").select("*").execute(),
            max_retries=3,
        )
    """
    attempts = max(1, max_retries)
    delay = initial_delay

    for attempt in range(attempts):
        try:
            return func()
        except RETRYABLE_ERRORS as e:
            if attempt == attempts - 1:
                logger.error("Network error after %d attempts: %s", attempts, e)
                raise
            logger.warning(
                "Network error (attempt %d/%d): %s. Retrying in %.1fs...",
                attempt + 1,
                attempts,
                e,
                delay,
            )
            sleep(delay)
            delay *= 2

    # Unreachable: the loop either returns or raises
    raise RuntimeError("Retry loop completed without result or exception")
