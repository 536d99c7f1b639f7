#!/usr/bin/env python3
"""Script to delete expired rows from the server-side translation cache."""

import sys
import os

# Add parent directory to path to import linguabatch
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from linguabatch import create_app
from linguabatch.models import TranslationCache
from linguabatch.services.document_cache import purge_expired


def purge(ttl_seconds: float) -> int:
    """Delete cached translations older than ``ttl_seconds``.

    Returns:
        Number of rows deleted
    """
    total = TranslationCache.query.count()
    print(f"Translation cache holds {total} rows, purging entries older than {ttl_seconds:.0f}s")

    deleted = purge_expired(ttl_seconds)
    print(f"✅ Deleted {deleted} expired rows ({total - deleted} remaining)")
    return deleted


if __name__ == '__main__':
    if len(sys.argv) > 2:
        print("Usage: python purge_translation_cache.py [ttl_seconds]")
        print("Example: python purge_translation_cache.py 86400")
        sys.exit(1)

    app = create_app()
    ttl = float(sys.argv[1]) if len(sys.argv) == 2 else app.config['TRANSLATION_CACHE_TTL']

    with app.app_context():
        purge(ttl)
