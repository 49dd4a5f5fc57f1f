from .retry import (
    RetryPolicy,
    NO_RETRY,
    is_transient_network_error,
    is_retriable_source_error,
    is_retriable_notifier_error,
)

__all__ = [
    "RetryPolicy",
    "NO_RETRY",
    "is_transient_network_error",
    "is_retriable_source_error",
    "is_retriable_notifier_error",
]
