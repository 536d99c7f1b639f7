"""Server-side translation cache backed by the database.

Rows are keyed by ``{from}_{to}_{hash(text)}``. Rows older than the TTL are
treated as missing; ``purge_expired`` deletes them for housekeeping.
Database errors never reach the caller: they are logged and the session is
rolled back.
"""
import logging
from datetime import datetime, timedelta

from linguabatch import db
from linguabatch.models import TranslationCache
from linguabatch.models.translation_cache import make_doc_id

logger = logging.getLogger(__name__)

DEFAULT_TTL = 24 * 60 * 60


def _rollback():
    try:
        db.session.rollback()
    except Exception as e:
        logger.error(f"Rollback failed: {e}")


def get_cached_translation(text: str, source_lang: str, target_lang: str, ttl: float = DEFAULT_TTL):
    """Check if we have a fresh cached translation."""
    return get_cached_translations([text], source_lang, target_lang, ttl).get(text)


def get_cached_translations(texts, source_lang: str, target_lang: str, ttl: float = DEFAULT_TTL) -> dict:
    """Look up many texts at once. Returns ``{text: translation}`` for fresh hits only."""
    if not texts:
        return {}
    doc_ids = {make_doc_id(text, source_lang, target_lang): text for text in texts}
    cutoff = datetime.utcnow() - timedelta(seconds=ttl)
    try:
        rows = TranslationCache.query.filter(
            TranslationCache.doc_id.in_(list(doc_ids)),
            TranslationCache.created_at >= cutoff,
        ).all()
    except Exception as e:
        logger.warning(f"Cache lookup error: {e}")
        _rollback()
        return {}

    hits = {}
    for row in rows:
        text = doc_ids.get(row.doc_id)
        # Guard against hash collisions on the truncated digest
        if text is not None and row.original_text == text:
            hits[text] = row.translated_text
    logger.debug(f"Document cache {source_lang}->{target_lang}: {len(hits)}/{len(doc_ids)} hits")
    return hits


def cache_translations(texts, translations, source_lang: str, target_lang: str) -> int:
    """Store (or refresh) translations. Returns the number of rows written."""
    if len(texts) != len(translations):
        raise ValueError('texts and translations differ in length')

    pairs = dict(zip(texts, translations))
    if not pairs:
        return 0
    doc_ids = {make_doc_id(text, source_lang, target_lang): text for text in pairs}
    now = datetime.utcnow()
    try:
        existing = {
            row.doc_id: row
            for row in TranslationCache.query.filter(TranslationCache.doc_id.in_(list(doc_ids))).all()
        }
        for doc_id, text in doc_ids.items():
            row = existing.get(doc_id)
            if row is None:
                row = TranslationCache(
                    doc_id=doc_id,
                    source_lang=source_lang,
                    target_lang=target_lang,
                    original_text=text,
                )
                db.session.add(row)
            row.translated_text = pairs[text]
            row.created_at = now
        db.session.commit()
        return len(doc_ids)
    except Exception as e:
        logger.warning(f"Cache storage error: {e}")
        _rollback()
        return 0


def purge_expired(ttl: float = DEFAULT_TTL) -> int:
    """Delete rows older than the TTL. Returns the number deleted."""
    cutoff = datetime.utcnow() - timedelta(seconds=ttl)
    try:
        deleted = TranslationCache.query.filter(TranslationCache.created_at < cutoff).delete(
            synchronize_session=False
        )
        db.session.commit()
        logger.info(f"Purged {deleted} expired translation cache rows")
        return deleted
    except Exception as e:
        logger.error(f"Cache purge error: {e}")
        _rollback()
        return 0
