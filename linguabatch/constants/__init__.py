"""Shared constants for the application."""

from linguabatch.constants.languages import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGES,
    SUPPORTED_LANGUAGE_CODES,
    DEEPL_LANGUAGE_MAPPING,
    is_supported_language,
    normalize_language,
    language_name,
    to_provider_code,
)

__all__ = [
    'DEFAULT_LANGUAGE',
    'SUPPORTED_LANGUAGES',
    'SUPPORTED_LANGUAGE_CODES',
    'DEEPL_LANGUAGE_MAPPING',
    'is_supported_language',
    'normalize_language',
    'language_name',
    'to_provider_code',
]
