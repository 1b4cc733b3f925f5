"""Custom exception classes for Finn."""


class FinnError(Exception):
    """Base exception for Finn."""
    pass


class ConfigError(FinnError):
    """Configuration-related errors."""
    pass


class NetworkError(FinnError):
    """Network and API-related errors."""
    pass


class LLMError(FinnError):
    """LLM processing errors."""
    pass


class ValidationError(FinnError):
    """Data validation errors."""
    pass


class NoValidTransactionsError(ValidationError):
    """Raised when an input yields no parseable transaction."""
    pass


class ProfileStoreError(FinnError):
    """Profile persistence errors."""
    pass


# Retryable errors
class RetryableError(FinnError):
    """Base class for errors that should trigger retry."""
    pass


class RetryableNetworkError(RetryableError, NetworkError):
    """Network errors that can be retried."""
    pass


class RetryableLLMError(RetryableError, LLMError):
    """LLM errors that can be retried."""
    pass
