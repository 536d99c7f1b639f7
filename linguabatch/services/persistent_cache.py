"""Persistent translation cache with per-entry expiry.

Layout of the serialized blob (one key in the durable store)::

    {"ES": {"Save": {"translation": "Guardar", "timestamp": 1700000000.0}}}

Entries older than the TTL are treated as absent when read; nothing sweeps
them proactively except the one-off pruning done when the blob is loaded.
"""

import json
import logging

from linguabatch.services.errors import CacheStorageError
from linguabatch.services.scheduler import SystemClock
from linguabatch.services.storage import MemoryStore

logger = logging.getLogger(__name__)

CACHE_KEY = 'translation_cache'
DEFAULT_TTL = 24 * 60 * 60


def _is_valid_entry(entry) -> bool:
    if not isinstance(entry, dict) or not isinstance(entry.get('translation'), str):
        return False
    timestamp = entry.get('timestamp')
    return isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool)


class PersistentCache:
    """``(target_language, source_text) -> translation`` cache."""

    def __init__(self, store=None, clock=None, ttl: float = DEFAULT_TTL, storage_key: str = CACHE_KEY):
        self.store = store if store is not None else MemoryStore()
        self.clock = clock or SystemClock()
        self.ttl = ttl
        self.storage_key = storage_key
        self.degraded = False
        self._entries = self._load()

    def get(self, text: str, lang: str):
        """Return the cached translation, or None if missing or expired."""
        entry = self._entries.get(lang, {}).get(text)
        if entry is None:
            return None
        if self.clock.now() - entry['timestamp'] > self.ttl:
            return None
        return entry['translation']

    def put(self, texts, translations, lang: str):
        """Store translations (positionally aligned with ``texts``)."""
        if len(texts) != len(translations):
            raise ValueError(
                f"texts and translations differ in length ({len(texts)} != {len(translations)})"
            )
        now = self.clock.now()
        bucket = self._entries.setdefault(lang, {})
        for text, translation in zip(texts, translations):
            bucket[text] = {'translation': translation, 'timestamp': now}
        self._save()

    def clear(self, lang: str):
        """Drop every entry for one target language."""
        self._entries.pop(lang, None)
        if self.degraded:
            self._drop_stored(lang)
        else:
            self._save()

    def __len__(self):
        return sum(len(bucket) for bucket in self._entries.values())

    def _load(self) -> dict:
        try:
            raw = self.store.get_item(self.storage_key)
        except CacheStorageError as e:
            logger.error(f"Error loading translation cache: {e}")
            self.degraded = True
            return {}
        if not raw:
            return {}

        try:
            parsed = json.loads(raw)
        except ValueError as e:
            logger.error(f"Error loading translation cache: {e}")
            return {}
        if not isinstance(parsed, dict):
            return {}

        now = self.clock.now()
        entries = {}
        for lang, bucket in parsed.items():
            if not isinstance(bucket, dict):
                continue
            fresh = {
                text: entry
                for text, entry in bucket.items()
                if _is_valid_entry(entry) and now - entry['timestamp'] <= self.ttl
            }
            if fresh:
                entries[lang] = fresh
        return entries

    def _save(self):
        if self.degraded:
            return
        try:
            self.store.set_item(self.storage_key, json.dumps(self._entries, ensure_ascii=False))
        except (CacheStorageError, TypeError, ValueError) as e:
            # Keep serving from memory for the rest of the session
            self.degraded = True
            logger.error(f"Error saving translation cache, continuing in memory only: {e}")

    def _drop_stored(self, lang: str):
        # Degraded caches stop writing, but removing a language only shrinks the blob
        try:
            raw = self.store.get_item(self.storage_key)
            stored = json.loads(raw) if raw else None
            if isinstance(stored, dict) and lang in stored:
                del stored[lang]
                self.store.set_item(self.storage_key, json.dumps(stored, ensure_ascii=False))
        except (CacheStorageError, ValueError) as e:
            logger.error(f"Error clearing {lang} from stored translation cache: {e}")
