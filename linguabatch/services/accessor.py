"""Consumer-facing translation lookup.

``TranslationAccessor.translate`` never blocks and never raises: it returns
the best answer available right now (cached translation, or the source text
as a placeholder) and schedules a lookup for misses. Subscribers are told
when a batch resolves so they can re-render.
"""

import logging

from linguabatch.config import TranslationSettings
from linguabatch.constants.languages import is_supported_language, normalize_language
from linguabatch.services.batcher import BatchCoalescer
from linguabatch.services.errors import CacheStorageError
from linguabatch.services.gateway import TranslationGateway
from linguabatch.services.persistent_cache import PersistentCache
from linguabatch.services.results import Translated
from linguabatch.services.scheduler import Scheduler, SystemClock
from linguabatch.services.storage import MemoryStore

logger = logging.getLogger(__name__)

PREFERENCE_KEY = 'preferred_language'


class TranslationAccessor:
    """Reactive accessor over the cache/coalescer stack."""

    def __init__(self, coalescer, cache, preferences=None, source_language: str = 'EN'):
        self.coalescer = coalescer
        self.cache = cache
        self.preferences = preferences if preferences is not None else MemoryStore()
        self.source_language = normalize_language(source_language)
        self._resolved = {}   # language -> {text: Translated | Fallback}
        self._inflight = set()
        self._listeners = []
        self.current_language = self._load_preference()

    # Language preference

    def _load_preference(self) -> str:
        try:
            saved = self.preferences.get_item(PREFERENCE_KEY)
        except CacheStorageError as e:
            logger.warning(f"Could not read language preference: {e}")
            return self.source_language
        if saved and is_supported_language(saved):
            return normalize_language(saved)
        return self.source_language

    def set_language(self, language: str):
        """Switch the active language.

        Cached entries for the new language are dropped (memory and durable)
        so the next lookups fetch fresh translations.

        Raises:
            UnsupportedLanguageError: for codes outside the supported set.
        """
        language = normalize_language(language)
        try:
            self.preferences.set_item(PREFERENCE_KEY, language)
        except CacheStorageError as e:
            logger.warning(f"Could not persist language preference: {e}")

        self.current_language = language
        self.cache.clear(language)
        self._resolved.pop(language, None)
        self._notify({})

    # Lookup

    def translate(self, text: str, language: str = None) -> str:
        """Return the translation of ``text`` available right now."""
        try:
            return self._translate(text, language)
        except Exception as e:
            logger.error(f"Translation lookup failed for {text!r}: {e}", exc_info=True)
            return text

    def _translate(self, text, language):
        language = normalize_language(language) if language else self.current_language
        if not text or language == self.source_language:
            return text

        result = self._resolved.get(language, {}).get(text)
        if result is not None:
            return result.text

        cached = self.cache.get(text, language)
        if cached is not None:
            self._resolved.setdefault(language, {})[text] = Translated(text, cached)
            return cached

        key = (language, text)
        if key not in self._inflight:
            self._inflight.add(key)
            self.coalescer.enqueue(text, language, lambda result: self._on_resolved(language, result))
        return text

    def result_for(self, text: str, language: str = None):
        """The ``Translated``/``Fallback`` recorded for ``text``, or None if unresolved."""
        language = normalize_language(language) if language else self.current_language
        return self._resolved.get(language, {}).get(text)

    def _on_resolved(self, language, result):
        self._inflight.discard((language, result.source))
        self._resolved.setdefault(language, {})[result.source] = result
        self._notify({result.source: result.text}, language)

    # Notifications

    def subscribe(self, listener):
        """Register ``listener(updates, language)``; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, updates, language=None):
        for listener in list(self._listeners):
            try:
                listener(updates, language or self.current_language)
            except Exception as e:
                logger.error(f"Translation listener failed: {e}", exc_info=True)


def build_translation_client(provider, settings: TranslationSettings = None, clock=None,
                             store=None, preferences=None):
    """Assemble the translation client stack.

    Build one per process or session and share it with every consumer.

    Returns:
        Tuple of (accessor, scheduler). Drive the scheduler from the host
        event loop (``run_due``) or with ``run_until_idle``.
    """
    settings = settings or TranslationSettings()
    clock = clock or SystemClock()
    store = store if store is not None else MemoryStore(settings.cache_max_bytes)

    scheduler = Scheduler(clock)
    cache = PersistentCache(store, clock, ttl=settings.cache_ttl)
    gateway = TranslationGateway(provider, clock, settings)
    coalescer = BatchCoalescer(gateway, scheduler, cache, settings)
    accessor = TranslationAccessor(
        coalescer,
        cache,
        preferences=preferences if preferences is not None else store,
        source_language=settings.source_language,
    )
    return accessor, scheduler
