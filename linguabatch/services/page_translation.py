"""Whole-page translation with a per-page, per-locale cache."""

import logging
from datetime import datetime

from linguabatch import db
from linguabatch.models import PageTranslation
from linguabatch.services.errors import TranslationError

logger = logging.getLogger(__name__)

DEFAULT_TTL = 24 * 60 * 60
EXPIRED = datetime(1970, 1, 1)


def get_cached_page(path: str, locale: str, ttl: float = DEFAULT_TTL):
    """Return cached content for the page, or None if missing or expired."""
    try:
        page = PageTranslation.query.filter_by(path=path, locale=locale).first()
    except Exception as e:
        logger.warning(f"Error fetching cached page translation: {e}")
        db.session.rollback()
        return None
    if page is None or page.is_expired(ttl):
        return None
    return page.get_content()


def set_cached_page(path: str, locale: str, content: dict):
    """Store the translated content of a page."""
    try:
        page = PageTranslation.query.filter_by(path=path, locale=locale).first()
        if page is None:
            page = PageTranslation(path=path, locale=locale)
            db.session.add(page)
        page.set_content(content)
        page.last_updated = datetime.utcnow()
        db.session.commit()
    except Exception as e:
        logger.warning(f"Error caching page translation: {e}")
        db.session.rollback()


def invalidate_path(path: str) -> int:
    """Mark every locale of a page as expired. Returns the number of rows touched."""
    try:
        updated = PageTranslation.query.filter_by(path=path).update(
            {'last_updated': EXPIRED}, synchronize_session=False
        )
        db.session.commit()
        return updated
    except Exception as e:
        logger.error(f"Error invalidating page cache for {path}: {e}")
        db.session.rollback()
        return 0


def translate_page(path: str, locale: str, default_content: dict, gateway,
                   source_language: str = 'EN', ttl: float = DEFAULT_TTL):
    """Translate every value of ``default_content`` for one page.

    Returns:
        Tuple of (content, cached). On any translation failure the default
        content is returned untouched.
    """
    if locale == source_language:
        return dict(default_content), False

    cached = get_cached_page(path, locale, ttl)
    if cached is not None and set(cached) == set(default_content):
        return cached, True

    keys = list(default_content)
    texts = [default_content[key] for key in keys]
    try:
        translations = gateway.translate_batch(texts, source_language, locale)
    except TranslationError as e:
        logger.error(f"Page translation failed for {path} [{locale}]: {e}")
        return dict(default_content), False

    content = dict(zip(keys, translations))
    set_cached_page(path, locale, content)
    return content, False
