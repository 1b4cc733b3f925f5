"""Utility modules."""
from .logger import get_logger, set_profile_context, set_log_level, configure_logging, finn_home
from .exceptions import (
    FinnError,
    ConfigError,
    NetworkError,
    LLMError,
    ValidationError,
    NoValidTransactionsError,
    ProfileStoreError,
    RetryableError,
    RetryableNetworkError,
    RetryableLLMError
)
from .retry import retry_with_backoff

__all__ = [
    "get_logger",
    "set_profile_context",
    "set_log_level",
    "configure_logging",
    "finn_home",
    "FinnError",
    "ConfigError",
    "NetworkError",
    "LLMError",
    "ValidationError",
    "NoValidTransactionsError",
    "ProfileStoreError",
    "RetryableError",
    "RetryableNetworkError",
    "RetryableLLMError",
    "retry_with_backoff"
]
