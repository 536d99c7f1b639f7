"""Database models for the translation service."""

from .translation_cache import TranslationCache
from .page_translation import PageTranslation

__all__ = ['TranslationCache', 'PageTranslation']
