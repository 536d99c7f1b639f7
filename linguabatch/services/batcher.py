"""Batch coalescer: one provider request per target language per window.

Per target language the coalescer moves through::

    IDLE -> COLLECTING -> SENDING -> IDLE

The first ``enqueue`` for a language opens a batch and arms a timer. The
batch is sealed when the timer fires or when it holds ``batch_size`` unique
texts, whichever happens first. Sealing detaches the batch from the table
before the gateway is called, so enqueues made while it is being sent open
a fresh batch instead of mutating the one in flight.
"""

import logging
from dataclasses import dataclass, field

from linguabatch.config import TranslationSettings
from linguabatch.services.errors import TranslationError
from linguabatch.services.results import Fallback, Translated

logger = logging.getLogger(__name__)

IDLE = 'idle'
COLLECTING = 'collecting'
SENDING = 'sending'


@dataclass
class PendingBatch:
    """Unique texts waiting for one target language, with their callbacks."""

    language: str
    opened_at: float
    callbacks: dict = field(default_factory=dict)  # text -> [callback, ...]
    timer: object = None

    @property
    def queued_texts(self):
        # dicts keep insertion order
        return list(self.callbacks)

    def __len__(self):
        return len(self.callbacks)

    def add(self, text, callback):
        self.callbacks.setdefault(text, []).append(callback)


class BatchCoalescer:
    """Collects translation requests and sends them in batches."""

    def __init__(self, gateway, scheduler, cache=None, settings: TranslationSettings = None,
                 source_language: str = None):
        self.gateway = gateway
        self.scheduler = scheduler
        self.cache = cache
        self.settings = settings or TranslationSettings()
        self.source_language = source_language or self.settings.source_language
        self._open = {}      # language -> PendingBatch
        self._sending = {}   # language -> number of batches in flight

    def state(self, language: str) -> str:
        if language in self._open:
            return COLLECTING
        if self._sending.get(language):
            return SENDING
        return IDLE

    def pending_texts(self, language: str):
        batch = self._open.get(language)
        return batch.queued_texts if batch else []

    def enqueue(self, text: str, language: str, on_resolved):
        """Queue ``text`` for translation into ``language``.

        ``on_resolved`` is called exactly once with a ``Translated`` or a
        ``Fallback`` result.
        """
        batch = self._open.get(language)
        if batch is None:
            batch = PendingBatch(language=language, opened_at=self.scheduler.clock.monotonic())
            batch.timer = self.scheduler.call_later(self.settings.batch_window, self._on_timer, batch)
            self._open[language] = batch
            logger.debug(f"Opened translation batch for {language}")

        batch.add(text, on_resolved)

        if len(batch) >= self.settings.batch_size:
            # Detach now, send on the next scheduler turn so enqueue never blocks
            self._seal(batch, immediate=False)

    def flush(self, language: str = None):
        """Seal open batches right away (all languages if none given)."""
        languages = [language] if language else list(self._open)
        for lang in languages:
            batch = self._open.get(lang)
            if batch is not None:
                self._seal(batch, immediate=True)

    def _on_timer(self, batch):
        # The batch may already have been sealed by the size threshold
        if self._open.get(batch.language) is batch:
            self._seal(batch, immediate=True)

    def _seal(self, batch, immediate):
        language = batch.language
        if self._open.get(language) is batch:
            del self._open[language]
        if batch.timer is not None:
            batch.timer.cancel()
        self._sending[language] = self._sending.get(language, 0) + 1
        if immediate:
            self._send(batch)
        else:
            self.scheduler.call_soon(self._send, batch)

    def _send(self, batch):
        language = batch.language
        texts = batch.queued_texts
        logger.info(f"Translating batch of {len(texts)} texts to {language}")

        try:
            try:
                translations = self.gateway.translate_batch(texts, self.source_language, language)
            except TranslationError as e:
                logger.error(f"Batch translation to {language} failed, using source text: {e}")
                results = {text: Fallback(text, str(e)) for text in texts}
            except Exception as e:
                logger.exception(f"Unexpected error translating batch to {language}: {e}")
                results = {text: Fallback(text, f'unexpected error: {e}') for text in texts}
            else:
                results = {
                    text: Translated(text, translation)
                    for text, translation in zip(texts, translations)
                }
                if self.cache is not None:
                    self.cache.put(texts, translations, language)
        finally:
            self._sending[language] -= 1
            if not self._sending[language]:
                del self._sending[language]

        self._dispatch(batch, results)

    def _dispatch(self, batch, results):
        for text, callbacks in batch.callbacks.items():
            result = results[text]
            for callback in callbacks:
                try:
                    callback(result)
                except Exception as e:
                    logger.error(f"Translation callback for {text!r} failed: {e}", exc_info=True)
