import pytest

from linguabatch.constants import (
    DEFAULT_LANGUAGE,
    SUPPORTED_LANGUAGE_CODES,
    is_supported_language,
    language_name,
    normalize_language,
    to_provider_code,
)
from linguabatch.services.errors import TranslationError, UnsupportedLanguageError


def test_supported_set_is_closed():
    assert SUPPORTED_LANGUAGE_CODES == {'EN', 'ES', 'FR', 'DE', 'ZH', 'JA', 'KO', 'AR'}
    assert DEFAULT_LANGUAGE == 'EN'


@pytest.mark.parametrize('code', ['es', ' ES ', 'Es'])
def test_normalize_language_accepts_case_and_whitespace(code):
    assert normalize_language(code) == 'ES'


@pytest.mark.parametrize('code', ['PT', '', None, 42, 'english'])
def test_normalize_language_rejects_unknown_codes(code):
    assert not is_supported_language(code)
    with pytest.raises(UnsupportedLanguageError):
        normalize_language(code)


def test_language_name():
    assert language_name('ja') == 'Japanese'


def test_to_provider_code_uses_mapping():
    assert to_provider_code('DE') == 'DE'


def test_unmapped_code_is_configuration_error():
    with pytest.raises(UnsupportedLanguageError) as exc:
        to_provider_code('FR', mapping={'EN': 'EN'})
    assert exc.value.reason == 'no provider mapping'
    assert isinstance(exc.value, TranslationError)
