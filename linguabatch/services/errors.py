"""Error types for the translation pipeline.

Configuration errors fail fast. Provider errors are transient and retried.
Cache storage errors are always logged and swallowed by the cache.
"""


class TranslationError(Exception):
    """Base class for translation failures."""


class UnsupportedLanguageError(TranslationError, ValueError):
    """Language code outside the supported set or without a provider mapping."""

    def __init__(self, code, reason='unsupported language code'):
        self.code = code
        self.reason = reason
        super().__init__(f"{reason}: {code!r}")


class ProviderError(TranslationError):
    """Transient failure talking to the translation provider."""

    def __init__(self, message, status_code=None, details=None):
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ProviderRateLimitError(ProviderError):
    """Provider answered 429."""


class ProviderTimeoutError(ProviderError):
    """Provider call (or the overall deadline) timed out."""


class MalformedResponseError(ProviderError):
    """Provider response is missing a usable translations array."""


class RetriesExhaustedError(TranslationError):
    """All retry attempts failed; ``last_error`` holds the final cause."""

    def __init__(self, attempts, last_error):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"translation failed after {attempts} attempts: {last_error}")


class CacheStorageError(Exception):
    """Durable cache store could not be read or written."""
