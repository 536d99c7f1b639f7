"""Translation gateway: chunking, rate limiting and retry around a provider.

``TranslationGateway.translate_batch`` always returns a list positionally
aligned with its input, or raises a ``TranslationError``:

- ``UnsupportedLanguageError`` for unknown codes (fails fast, never retried)
- ``RetriesExhaustedError`` once every retry of a transient failure is used up
- ``ProviderError`` for permanent provider rejections (bad key, bad request)
- ``ProviderTimeoutError`` when the caller's deadline passes
"""

import logging

from linguabatch.config import TranslationSettings
from linguabatch.constants.languages import to_provider_code
from linguabatch.services.errors import (
    MalformedResponseError,
    ProviderError,
    ProviderTimeoutError,
    RetriesExhaustedError,
)
from linguabatch.services.scheduler import SystemClock

logger = logging.getLogger(__name__)

# Provider statuses worth retrying; every other 4xx is a permanent rejection
RETRYABLE_STATUS_CODES = {408, 429}


def is_retryable(error: ProviderError) -> bool:
    if error.status_code is None:
        return True
    return error.status_code in RETRYABLE_STATUS_CODES or error.status_code >= 500


class RateLimiter:
    """Fixed-window request counter.

    Once ``limit`` requests were made in the current window, ``acquire``
    sleeps until the window rolls over.
    """

    def __init__(self, clock, limit: int, window: float):
        self.clock = clock
        self.limit = limit
        self.window = window
        self._window_start = clock.monotonic()
        self._count = 0

    @property
    def count(self) -> int:
        self._roll()
        return self._count

    def _roll(self):
        now = self.clock.monotonic()
        if now - self._window_start >= self.window:
            self._window_start = now
            self._count = 0

    def acquire(self, deadline: float = None):
        """Take one request slot, sleeping for the next window if needed.

        Raises ProviderTimeoutError instead of sleeping past ``deadline``.
        """
        self._roll()
        if self.limit and self._count >= self.limit:
            wait = self._window_start + self.window - self.clock.monotonic()
            if deadline is not None and self.clock.monotonic() + wait > deadline:
                raise ProviderTimeoutError('translation deadline exceeded waiting for provider rate limit')
            logger.info(f"Provider rate limit reached ({self.limit}/{self.window}s), waiting {wait:.2f}s")
            self.clock.sleep(wait)
            self._roll()
        self._count += 1


class TranslationGateway:
    """Sends batches to a provider, one chunk at a time."""

    def __init__(self, provider, clock=None, settings: TranslationSettings = None, language_mapping=None):
        self.provider = provider
        self.clock = clock or SystemClock()
        self.settings = settings or TranslationSettings()
        self.language_mapping = language_mapping
        self.rate_limiter = RateLimiter(
            self.clock, self.settings.provider_rate_limit, self.settings.provider_rate_window
        )
        self.calls_made = 0

    def translate_batch(self, texts, source: str, target: str, deadline: float = None):
        """Translate ``texts`` from ``source`` to ``target``.

        Args:
            texts: Source strings; order is preserved in the result.
            source: Internal source language code.
            target: Internal target language code.
            deadline: Optional absolute ``clock.monotonic()`` time after which
                no further chunk or retry is attempted.

        Returns:
            List of translated strings, same length as ``texts``.
        """
        # Validate both codes up front so a configuration error never reaches the network
        to_provider_code(source, self.language_mapping)
        to_provider_code(target, self.language_mapping)

        texts = list(texts)
        if source.strip().upper() == target.strip().upper():
            return texts
        if not texts:
            return []

        chunk_size = max(1, self.settings.provider_max_batch_size)
        results = []
        for index, start in enumerate(range(0, len(texts), chunk_size)):
            if index and self.settings.provider_chunk_delay:
                self._check_deadline(deadline, upcoming_sleep=self.settings.provider_chunk_delay)
                self.clock.sleep(self.settings.provider_chunk_delay)
            chunk = texts[start:start + chunk_size]
            results.extend(self._translate_chunk(chunk, source, target, deadline))

        logger.info(f"Translated {len(texts)} texts {source}->{target} in {index + 1} chunk(s)")
        return results

    def translate_text(self, text: str, source: str, target: str) -> str:
        """Translate a single text. Empty text stays empty."""
        if not text:
            return ''
        return self.translate_batch([text], source, target)[0]

    def _translate_chunk(self, chunk, source, target, deadline):
        attempts = self.settings.provider_max_retries + 1
        last_error = None

        for attempt in range(attempts):
            self._check_deadline(deadline)
            self.rate_limiter.acquire(deadline)
            call_kwargs = self._call_timeout(deadline)
            self.calls_made += 1
            try:
                translations = self.provider.translate(chunk, source, target, **call_kwargs)
                if not isinstance(translations, list) or len(translations) != len(chunk):
                    raise MalformedResponseError(f"provider returned misaligned translations for {len(chunk)} texts")
            except ProviderError as e:
                if not is_retryable(e):
                    logger.error(f"Provider rejected request permanently: {e}")
                    raise
                last_error = e
                if attempt + 1 < attempts:
                    delay = self.settings.provider_backoff_base * (2 ** attempt)
                    logger.warning(
                        f"Provider error (attempt {attempt + 1}/{attempts}): {e}. Retrying in {delay:.2f}s"
                    )
                    self._check_deadline(deadline, upcoming_sleep=delay)
                    self.clock.sleep(delay)
                continue
            return translations

        logger.error(f"Translation failed after {attempts} attempts: {last_error}")
        raise RetriesExhaustedError(attempts, last_error) from last_error

    def _check_deadline(self, deadline, upcoming_sleep: float = 0):
        if deadline is not None and self.clock.monotonic() + upcoming_sleep > deadline:
            raise ProviderTimeoutError('translation deadline exceeded')

    def _call_timeout(self, deadline):
        # Without a deadline the provider keeps its own configured timeout
        if deadline is None:
            return {}
        remaining = deadline - self.clock.monotonic()
        if remaining <= 0:
            raise ProviderTimeoutError('translation deadline exceeded')
        return {'timeout': min(self.settings.provider_timeout, remaining)}
