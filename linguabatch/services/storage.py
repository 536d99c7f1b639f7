"""Durable key/value stores backing the persistent translation cache.

Every store has the same tiny surface as browser storage:
``get_item(key)``, ``set_item(key, value)`` and ``remove_item(key)``, with
string values. Writes beyond ``max_bytes`` raise ``CacheStorageError``, the
same way a browser raises once the storage quota is exhausted.
"""

import json
import os
from pathlib import Path

from linguabatch.services.errors import CacheStorageError
from linguabatch.services.redis_client import get_redis

DEFAULT_MAX_BYTES = 5 * 1024 * 1024


def _size_of(items: dict) -> int:
    return sum(len(k.encode('utf-8')) + len(v.encode('utf-8')) for k, v in items.items())


class MemoryStore:
    """In-process store. Survives nothing, but honours the quota."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES):
        self.max_bytes = max_bytes
        self._items = {}

    def get_item(self, key: str):
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        candidate = dict(self._items)
        candidate[key] = value
        if _size_of(candidate) > self.max_bytes:
            raise CacheStorageError(f"storage quota exceeded writing {key!r}")
        self._items = candidate

    def remove_item(self, key: str):
        self._items.pop(key, None)


class FileStore:
    """JSON file on disk holding every key of the store."""

    def __init__(self, path, max_bytes: int = DEFAULT_MAX_BYTES):
        self.path = Path(path)
        self.max_bytes = max_bytes

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CacheStorageError(f"could not read {self.path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str):
        return self._load().get(key)

    def set_item(self, key: str, value: str):
        items = self._load()
        items[key] = value
        if _size_of(items) > self.max_bytes:
            raise CacheStorageError(f"storage quota exceeded writing {key!r}")
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(items, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise CacheStorageError(f"could not write {self.path}: {e}") from e

    def remove_item(self, key: str):
        items = self._load()
        if items.pop(key, None) is not None:
            try:
                with open(self.path, 'w', encoding='utf-8') as f:
                    json.dump(items, f, ensure_ascii=False)
            except OSError as e:
                raise CacheStorageError(f"could not write {self.path}: {e}") from e


class RedisStore:
    """Store keys in Redis under a common prefix."""

    def __init__(self, prefix: str = 'linguabatch:', max_bytes: int = DEFAULT_MAX_BYTES, client=None):
        self.prefix = prefix
        self.max_bytes = max_bytes
        self._client = client

    def _redis(self):
        r = self._client if self._client is not None else get_redis()
        if r is None:
            raise CacheStorageError('Redis is not configured')
        return r

    def get_item(self, key: str):
        try:
            return self._redis().get(f"{self.prefix}{key}")
        except CacheStorageError:
            raise
        except Exception as e:
            raise CacheStorageError(f"Redis read failed: {e}") from e

    def set_item(self, key: str, value: str):
        if len(value.encode('utf-8')) > self.max_bytes:
            raise CacheStorageError(f"storage quota exceeded writing {key!r}")
        try:
            self._redis().set(f"{self.prefix}{key}", value)
        except CacheStorageError:
            raise
        except Exception as e:
            raise CacheStorageError(f"Redis write failed: {e}") from e

    def remove_item(self, key: str):
        try:
            self._redis().delete(f"{self.prefix}{key}")
        except CacheStorageError:
            raise
        except Exception as e:
            raise CacheStorageError(f"Redis delete failed: {e}") from e
