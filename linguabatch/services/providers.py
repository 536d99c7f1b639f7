"""Translation providers.

A provider translates exactly one chunk of texts in one HTTP call:
``translate(texts, source, target, timeout=None) -> list[str]``, where
``timeout`` overrides the configured request timeout for that call.
Chunking, retries and rate limiting are the gateway's job, not the
provider's.
"""

import logging
import requests

from linguabatch.constants.languages import to_provider_code
from linguabatch.services.errors import (
    MalformedResponseError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)

DEEPL_API_URL = 'https://api-free.deepl.com/v2/translate'


def _extract_translations(payload, expected: int, key_path):
    """Pull the translations list out of a JSON payload or raise MalformedResponseError."""
    translations = payload
    for key in key_path:
        if not isinstance(translations, dict) or key not in translations:
            raise MalformedResponseError(f"response is missing '{key}'")
        translations = translations[key]
    if not isinstance(translations, list):
        raise MalformedResponseError('translations is not a list')
    if len(translations) != expected:
        raise MalformedResponseError(
            f"expected {expected} translations, got {len(translations)}"
        )
    return translations


class DeepLProvider:
    """Translate using the DeepL REST API."""

    name = 'deepl'

    def __init__(self, api_key: str, api_url: str = DEEPL_API_URL,
                 timeout: float = 30, session=None):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def translate(self, texts, source: str, target: str, timeout: float = None):
        timeout = timeout if timeout is not None else self.timeout
        source_code = to_provider_code(source)
        target_code = to_provider_code(target)

        data = [('text', text) for text in texts]
        # DeepL auto-detects; English source is the default and is omitted
        if source_code != 'EN':
            data.append(('source_lang', source_code))
        data.append(('target_lang', target_code))

        logger.debug(f"DeepL request: {len(texts)} texts {source_code}->{target_code}")

        try:
            response = self.session.post(
                self.api_url,
                data=data,
                headers={'Authorization': f'DeepL-Auth-Key {self.api_key}'},
                timeout=timeout,
            )
        except requests.Timeout as e:
            raise ProviderTimeoutError(f"DeepL timeout after {timeout}s") from e
        except requests.RequestException as e:
            raise ProviderError(f"DeepL request failed: {e}") from e

        if response.status_code == 429:
            raise ProviderRateLimitError('DeepL rate limit exceeded', status_code=429)
        if response.status_code != 200:
            raise ProviderError(
                f"DeepL error {response.status_code}",
                status_code=response.status_code,
                details=response.text[:500],
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError('DeepL returned invalid JSON') from e

        translations = _extract_translations(payload, len(texts), ['translations'])
        try:
            return [item['text'] for item in translations]
        except (TypeError, KeyError) as e:
            raise MalformedResponseError('DeepL translation item without text') from e


class RemoteTranslateProvider:
    """Translate through this service's own ``POST /api/translate`` endpoint.

    This is the client half used by the batched translation client.
    """

    name = 'remote'

    def __init__(self, endpoint: str, timeout: float = 20, session=None):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    def translate(self, texts, source: str, target: str, timeout: float = None):
        timeout = timeout if timeout is not None else self.timeout
        try:
            response = self.session.post(
                self.endpoint,
                json={'texts': list(texts), 'from': source, 'to': target},
                timeout=timeout,
            )
        except requests.Timeout as e:
            raise ProviderTimeoutError(f"translate endpoint timeout after {timeout}s") from e
        except requests.RequestException as e:
            raise ProviderError(f"translate endpoint unreachable: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code != 200:
            body = payload if isinstance(payload, dict) else {}
            message = body.get('error') or f"translate endpoint error {response.status_code}"
            error_cls = ProviderRateLimitError if response.status_code == 429 else ProviderError
            raise error_cls(message, status_code=response.status_code, details=body.get('details'))

        if payload is None:
            raise MalformedResponseError('translate endpoint returned invalid JSON')

        translations = _extract_translations(payload, len(texts), ['translations'])
        if not all(isinstance(t, str) for t in translations):
            raise MalformedResponseError('translations must be strings')
        return translations


class EchoProvider:
    """Deterministic in-process provider for development and tests.

    ``translate`` returns ``"[ES] Save"`` style strings.
    """

    name = 'echo'

    def __init__(self):
        self.calls = []

    def translate(self, texts, source: str, target: str, timeout: float = None):
        to_provider_code(source)
        to_provider_code(target)
        self.calls.append((list(texts), source, target))
        return [f"[{target}] {text}" for text in texts]


def create_provider(config):
    """Build the provider selected by ``TRANSLATION_SERVICE``."""
    service = (config.get('TRANSLATION_SERVICE') or 'deepl').lower()
    timeout = config.get('PROVIDER_TIMEOUT', 30)

    if service == 'deepl':
        api_key = config.get('DEEPL_API_KEY', '')
        if not api_key:
            logger.warning("DEEPL_API_KEY not set - DeepL calls will be rejected")
        return DeepLProvider(api_key, config.get('DEEPL_API_URL', DEEPL_API_URL), timeout)
    if service == 'remote':
        return RemoteTranslateProvider(config['TRANSLATE_ENDPOINT'], timeout)
    if service == 'echo':
        return EchoProvider()
    raise ValueError(f"Unknown TRANSLATION_SERVICE: {service!r}")
