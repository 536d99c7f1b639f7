"""Translation routes: batch translation, page translation, language list."""

import logging

from flask import Blueprint, current_app, jsonify, request

from linguabatch.config import TranslationSettings
from linguabatch.constants.languages import SUPPORTED_LANGUAGES, normalize_language
from linguabatch.services import document_cache, page_translation
from linguabatch.services.errors import TranslationError, UnsupportedLanguageError
from linguabatch.services.gateway import TranslationGateway
from linguabatch.services.providers import create_provider
from linguabatch.services.rate_guard import RateGuard
from linguabatch.services.scheduler import SystemClock

logger = logging.getLogger(__name__)

translate_bp = Blueprint('translate', __name__)


def get_translation_services():
    """Per-app gateway, settings and rate guard (created on first use)."""
    services = current_app.extensions.get('linguabatch')
    if services is None:
        config = current_app.config
        settings = TranslationSettings.from_config(config)
        services = {
            'settings': settings,
            'gateway': TranslationGateway(create_provider(config), SystemClock(), settings),
            'guard': RateGuard(
                config.get('TRANSLATE_ROUTE_RATE_LIMIT', 120),
                config.get('TRANSLATE_ROUTE_RATE_WINDOW', 60),
            ),
        }
        current_app.extensions['linguabatch'] = services
    return services


def _client_id():
    forwarded = request.headers.get('X-Forwarded-For', '')
    return forwarded.split(',')[0].strip() or request.remote_addr or 'unknown'


def _rate_limited():
    if get_translation_services()['guard'].allow(_client_id()):
        return None
    return jsonify({'error': 'Too many requests'}), 429


def translate_texts(texts, source, target, gateway, ttl):
    """Translate ``texts`` using the document cache first, the gateway for misses."""
    if source == target:
        return list(texts)

    unique = list(dict.fromkeys(texts))
    hits = document_cache.get_cached_translations(unique, source, target, ttl)
    misses = [text for text in unique if text not in hits]

    if misses:
        deadline = gateway.clock.monotonic() + current_app.config.get('TRANSLATE_ROUTE_TIMEOUT', 8)
        translated = gateway.translate_batch(misses, source, target, deadline=deadline)
        document_cache.cache_translations(misses, translated, source, target)
        hits.update(zip(misses, translated))

    return [hits[text] for text in texts]


@translate_bp.route('', methods=['POST'])
def translate():
    """Translate a batch of texts.

    Body params:
        - texts: list of strings
        - from: source language code
        - to: target language code
    """
    limited = _rate_limited()
    if limited:
        return limited

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid request body'}), 400

    texts = data.get('texts')
    source = data.get('from')
    target = data.get('to')
    if (
        not isinstance(texts, list)
        or not all(isinstance(t, str) for t in texts)
        or not isinstance(source, str) or not source.strip()
        or not isinstance(target, str) or not target.strip()
    ):
        return jsonify({'error': 'Invalid request body'}), 400

    try:
        source = normalize_language(source)
        target = normalize_language(target)
    except UnsupportedLanguageError as e:
        return jsonify({'error': 'Unsupported language', 'details': str(e)}), 400

    services = get_translation_services()
    try:
        translations = translate_texts(
            texts, source, target, services['gateway'], services['settings'].cache_ttl
        )
        return jsonify({'translations': translations}), 200
    except TranslationError as e:
        logger.error(f"[/api/translate] Error: {e}")
        return jsonify({'error': 'Translation failed', 'details': str(e)}), 500
    except Exception as e:
        logger.exception(f"[/api/translate] Unexpected error: {e}")
        return jsonify({'error': 'Translation failed', 'details': str(e)}), 500


@translate_bp.route('/languages', methods=['GET'])
def get_languages():
    """List supported languages."""
    return jsonify({'languages': SUPPORTED_LANGUAGES}), 200


@translate_bp.route('/page', methods=['POST'])
def translate_page():
    """Translate the content blocks of a page.

    Body params:
        - path: page path, e.g. '/dashboard/wallet'
        - locale: target language code
        - content: object of key -> source text
    """
    limited = _rate_limited()
    if limited:
        return limited

    data = request.get_json(silent=True) or {}
    path = data.get('path')
    locale = data.get('locale')
    content = data.get('content')

    if not isinstance(path, str) or not path or not isinstance(content, dict) \
            or not all(isinstance(v, str) for v in content.values()):
        return jsonify({'error': 'Invalid request body'}), 400

    try:
        locale = normalize_language(locale)
    except UnsupportedLanguageError as e:
        return jsonify({'error': 'Unsupported language', 'details': str(e)}), 400

    services = get_translation_services()
    settings = services['settings']
    try:
        translated, cached = page_translation.translate_page(
            path, locale, content, services['gateway'],
            source_language=settings.source_language, ttl=settings.cache_ttl,
        )
    except Exception as e:
        logger.exception(f"[/api/translate/page] Unexpected error: {e}")
        translated, cached = dict(content), False

    return jsonify({'content': translated, 'cached': cached}), 200


@translate_bp.route('/page', methods=['DELETE'])
def invalidate_page():
    """Expire every cached locale of a page.

    Body or query params:
        - path: page path
    """
    data = request.get_json(silent=True) or {}
    path = data.get('path') or request.args.get('path')
    if not path:
        return jsonify({'error': 'path is required'}), 400

    invalidated = page_translation.invalidate_path(path)
    return jsonify({'invalidated': invalidated}), 200
