"""
Retry Policy
============

One retry-with-backoff implementation shared by the source clients and the
notifier clients.

Usage:
    policy = RetryPolicy(max_attempts=3, base_delay=2.0,
                         backoff="exponential",
                         retry_on=is_retriable_source_error)
    data = policy.call(session.get, url, timeout=30)
"""

import logging
import time
from typing import Callable, Optional, TypeVar

import requests

from ..exceptions import SourceHTTPError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Substrings seen in transport errors that are worth another attempt
TRANSIENT_ERROR_MARKERS = (
    "connection reset",
    "connection refused",
    "connection aborted",
    "timed out",
    "unexpected eof",
    "handshake",
)


def _error_text(exc: BaseException) -> str:
    """Message of exc and of the exceptions it wraps, lowercased."""
    parts = []
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        parts.append(str(current))
        # urllib3 wraps the socket error in MaxRetryError.reason
        wrapped = list(current.args) + [getattr(current, "reason", None)]
        pending.extend(arg for arg in wrapped if isinstance(arg, BaseException))
        pending.extend([current.__cause__, current.__context__])
    return " ".join(parts).lower()


def is_transient_network_error(exc: BaseException) -> bool:
    """
    True for transport failures that usually go away on retry:
    connection reset/refused, timeouts, truncated bodies, TLS handshakes.
    DNS, proxy and certificate failures are not transient.
    """
    if isinstance(exc, (requests.exceptions.Timeout,
                        requests.exceptions.ChunkedEncodingError,
                        ConnectionResetError,
                        ConnectionRefusedError,
                        ConnectionAbortedError,
                        TimeoutError)):
        return True
    if isinstance(exc, (requests.exceptions.ConnectionError, OSError)):
        text = _error_text(exc)
        return any(marker in text for marker in TRANSIENT_ERROR_MARKERS)
    return False


def is_retriable_source_error(exc: BaseException) -> bool:
    """Sources retry on 5xx answers and on transport errors only."""
    if isinstance(exc, SourceHTTPError):
        return exc.is_server_error
    return isinstance(exc, requests.exceptions.RequestException) and is_transient_network_error(exc)


def is_retriable_notifier_error(exc: BaseException) -> bool:
    """Notifiers retry transport errors only; error answers surface at once."""
    return isinstance(exc, requests.exceptions.RequestException) and is_transient_network_error(exc)


class RetryPolicy:
    """
    Bounded retry with exponential or linear backoff.

    Attempt n (1-based) that fails with a retriable error sleeps
    base_delay * 2**(n-1) (exponential) or base_delay * n (linear)
    before attempt n+1.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        backoff: str = "exponential",
        retry_on: Callable[[BaseException], bool] = is_transient_network_error,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if backoff not in ("exponential", "linear"):
            raise ValueError(f"Unknown backoff: {backoff}")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.backoff = backoff
        self.retry_on = retry_on
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Delay after a failed 1-based attempt."""
        if self.backoff == "linear":
            return self.base_delay * attempt
        return self.base_delay * (2 ** (attempt - 1))

    def call(self, fn: Callable[..., T], *args, description: Optional[str] = None, **kwargs) -> T:
        """
        Call fn(*args, **kwargs), retrying retriable failures.

        Raises:
            The last exception once attempts are exhausted, or the first
            non-retriable exception immediately.
        """
        label = description or getattr(fn, "__name__", "call")
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                if attempt >= self.max_attempts or not self.retry_on(e):
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    f"{label} failed (attempt {attempt}/{self.max_attempts}): {e} - "
                    f"retrying in {delay:.1f}s"
                )
                self._sleep(delay)
        raise RuntimeError("unreachable")


NO_RETRY = RetryPolicy(max_attempts=1)
