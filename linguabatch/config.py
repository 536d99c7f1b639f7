"""Application configuration.

All tunables of the translation pipeline (batch window, thresholds, TTL,
retry/backoff) live here so they can be changed per environment.
"""

import os
from dataclasses import dataclass


def _env_int(name, default):
    return int(os.getenv(name, default))


def _env_float(name, default):
    return float(os.getenv(name, default))


class Config:
    """Base configuration shared by every environment."""

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///linguabatch.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    REDIS_URL = os.getenv('REDIS_URL')

    # Provider
    TRANSLATION_SERVICE = os.getenv('TRANSLATION_SERVICE', 'deepl')
    TRANSLATE_ENDPOINT = os.getenv('TRANSLATE_ENDPOINT', 'http://localhost:5000/api/translate')
    DEEPL_API_KEY = os.getenv('DEEPL_API_KEY', '')
    DEEPL_API_URL = os.getenv('DEEPL_API_URL', 'https://api-free.deepl.com/v2/translate')
    PROVIDER_MAX_BATCH_SIZE = _env_int('PROVIDER_MAX_BATCH_SIZE', 50)
    PROVIDER_CHUNK_DELAY = _env_float('PROVIDER_CHUNK_DELAY', 0.1)
    PROVIDER_RATE_LIMIT = _env_int('PROVIDER_RATE_LIMIT', 60)
    PROVIDER_RATE_WINDOW = _env_float('PROVIDER_RATE_WINDOW', 60)
    PROVIDER_MAX_RETRIES = _env_int('PROVIDER_MAX_RETRIES', 3)
    PROVIDER_BACKOFF_BASE = _env_float('PROVIDER_BACKOFF_BASE', 1.0)
    PROVIDER_TIMEOUT = _env_float('PROVIDER_TIMEOUT', 30)

    # Client-side batching and caching
    TRANSLATION_SOURCE_LANGUAGE = os.getenv('TRANSLATION_SOURCE_LANGUAGE', 'EN')
    TRANSLATION_BATCH_SIZE = _env_int('TRANSLATION_BATCH_SIZE', 20)
    TRANSLATION_BATCH_WINDOW = _env_float('TRANSLATION_BATCH_WINDOW', 0.2)
    TRANSLATION_CACHE_TTL = _env_int('TRANSLATION_CACHE_TTL', 24 * 60 * 60)
    TRANSLATION_CACHE_MAX_BYTES = _env_int('TRANSLATION_CACHE_MAX_BYTES', 5 * 1024 * 1024)

    # Inbound /api/translate guard
    TRANSLATE_ROUTE_TIMEOUT = _env_float('TRANSLATE_ROUTE_TIMEOUT', 8)
    TRANSLATE_ROUTE_RATE_LIMIT = _env_int('TRANSLATE_ROUTE_RATE_LIMIT', 120)
    TRANSLATE_ROUTE_RATE_WINDOW = _env_int('TRANSLATE_ROUTE_RATE_WINDOW', 60)


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    REDIS_URL = None
    TRANSLATION_SERVICE = 'echo'
    DEEPL_API_KEY = 'test-key'
    PROVIDER_CHUNK_DELAY = 0
    PROVIDER_BACKOFF_BASE = 0
    TRANSLATE_ROUTE_RATE_LIMIT = 1000


class ProductionConfig(Config):
    DEBUG = False


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


@dataclass(frozen=True)
class TranslationSettings:
    """Plain settings object handed to the service layer."""

    source_language: str = 'EN'
    batch_size: int = 20
    batch_window: float = 0.2
    cache_ttl: float = 24 * 60 * 60
    cache_max_bytes: int = 5 * 1024 * 1024
    provider_max_batch_size: int = 50
    provider_chunk_delay: float = 0.1
    provider_rate_limit: int = 60
    provider_rate_window: float = 60
    provider_max_retries: int = 3
    provider_backoff_base: float = 1.0
    provider_timeout: float = 30

    @classmethod
    def from_config(cls, config) -> 'TranslationSettings':
        """Build settings from a Flask config (or any mapping)."""
        return cls(
            source_language=config.get('TRANSLATION_SOURCE_LANGUAGE', cls.source_language),
            batch_size=config.get('TRANSLATION_BATCH_SIZE', cls.batch_size),
            batch_window=config.get('TRANSLATION_BATCH_WINDOW', cls.batch_window),
            cache_ttl=config.get('TRANSLATION_CACHE_TTL', cls.cache_ttl),
            cache_max_bytes=config.get('TRANSLATION_CACHE_MAX_BYTES', cls.cache_max_bytes),
            provider_max_batch_size=config.get('PROVIDER_MAX_BATCH_SIZE', cls.provider_max_batch_size),
            provider_chunk_delay=config.get('PROVIDER_CHUNK_DELAY', cls.provider_chunk_delay),
            provider_rate_limit=config.get('PROVIDER_RATE_LIMIT', cls.provider_rate_limit),
            provider_rate_window=config.get('PROVIDER_RATE_WINDOW', cls.provider_rate_window),
            provider_max_retries=config.get('PROVIDER_MAX_RETRIES', cls.provider_max_retries),
            provider_backoff_base=config.get('PROVIDER_BACKOFF_BASE', cls.provider_backoff_base),
            provider_timeout=config.get('PROVIDER_TIMEOUT', cls.provider_timeout),
        )
