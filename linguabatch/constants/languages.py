"""Language constants — single source of truth for supported languages.

Must stay in sync with the language selector on the frontend.
"""

from linguabatch.services.errors import UnsupportedLanguageError

DEFAULT_LANGUAGE = 'EN'

# Closed set of UI languages, in selector order
SUPPORTED_LANGUAGES = [
    {'code': 'EN', 'name': 'English'},
    {'code': 'ES', 'name': 'Spanish'},
    {'code': 'FR', 'name': 'French'},
    {'code': 'DE', 'name': 'German'},
    {'code': 'ZH', 'name': 'Chinese'},
    {'code': 'JA', 'name': 'Japanese'},
    {'code': 'KO', 'name': 'Korean'},
    {'code': 'AR', 'name': 'Arabic'},
]

SUPPORTED_LANGUAGE_CODES = frozenset(lang['code'] for lang in SUPPORTED_LANGUAGES)
LANGUAGE_NAMES = {lang['code']: lang['name'] for lang in SUPPORTED_LANGUAGES}

# Internal code -> DeepL code
# https://developers.deepl.com/docs/resources/supported-languages
DEEPL_LANGUAGE_MAPPING = {
    'EN': 'EN',
    'ES': 'ES',
    'FR': 'FR',
    'DE': 'DE',
    'ZH': 'ZH',
    'JA': 'JA',
    'KO': 'KO',
    'AR': 'AR',
}


def is_supported_language(code) -> bool:
    """Check if a language code is in the supported set."""
    if not isinstance(code, str):
        return False
    return code.strip().upper() in SUPPORTED_LANGUAGE_CODES


def normalize_language(code) -> str:
    """Normalize a language code to its canonical form.

    Raises:
        UnsupportedLanguageError: if the code is not supported.
    """
    if not is_supported_language(code):
        raise UnsupportedLanguageError(code)
    return code.strip().upper()


def language_name(code: str) -> str:
    """Return the display name for a language code."""
    return LANGUAGE_NAMES[normalize_language(code)]


def to_provider_code(code: str, mapping=None) -> str:
    """Map an internal language code to the provider's vocabulary.

    An unmapped code is a configuration error and is never retried.
    """
    mapping = DEEPL_LANGUAGE_MAPPING if mapping is None else mapping
    normalized = normalize_language(code)
    provider_code = mapping.get(normalized)
    if not provider_code:
        raise UnsupportedLanguageError(code, reason='no provider mapping')
    return provider_code
