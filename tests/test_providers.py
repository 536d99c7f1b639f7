"""Tests for the HTTP providers (mocked sessions)."""

from unittest.mock import MagicMock

import pytest
import requests

from linguabatch.services.errors import (
    MalformedResponseError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    UnsupportedLanguageError,
)
from linguabatch.services.providers import (
    DeepLProvider,
    EchoProvider,
    RemoteTranslateProvider,
    create_provider,
)


def make_response(status_code=200, payload=None, text=''):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError('no json')
    else:
        response.json.return_value = payload
    return response


def make_session(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return session


class TestDeepLProvider:
    def test_translate_sends_form_data(self):
        session = make_session(make_response(payload={
            'translations': [{'text': 'Hola'}, {'text': 'Mundo'}],
        }))
        provider = DeepLProvider('fake-key', timeout=30, session=session)

        assert provider.translate(['Hello', 'World'], 'EN', 'ES') == ['Hola', 'Mundo']

        _, kwargs = session.post.call_args
        assert kwargs['data'] == [('text', 'Hello'), ('text', 'World'), ('target_lang', 'ES')]
        assert kwargs['headers'] == {'Authorization': 'DeepL-Auth-Key fake-key'}
        assert kwargs['timeout'] == 30

    def test_call_timeout_overrides_configured_timeout(self):
        session = make_session(make_response(payload={'translations': [{'text': 'Hola'}]}))
        DeepLProvider('k', timeout=30, session=session).translate(['Hello'], 'EN', 'ES', timeout=2.5)

        _, kwargs = session.post.call_args
        assert kwargs['timeout'] == 2.5

    def test_non_english_source_is_sent(self):
        session = make_session(make_response(payload={'translations': [{'text': 'Hello'}]}))
        DeepLProvider('k', session=session).translate(['Hallo'], 'DE', 'EN')

        _, kwargs = session.post.call_args
        assert ('source_lang', 'DE') in kwargs['data']

    def test_429_is_rate_limit_error(self):
        provider = DeepLProvider('k', session=make_session(make_response(429)))
        with pytest.raises(ProviderRateLimitError):
            provider.translate(['Hello'], 'EN', 'ES')

    def test_server_error(self):
        provider = DeepLProvider('k', session=make_session(make_response(503, text='down')))
        with pytest.raises(ProviderError) as exc:
            provider.translate(['Hello'], 'EN', 'ES')
        assert exc.value.status_code == 503

    def test_timeout(self):
        provider = DeepLProvider('k', session=make_session(error=requests.Timeout()))
        with pytest.raises(ProviderTimeoutError):
            provider.translate(['Hello'], 'EN', 'ES')

    @pytest.mark.parametrize('payload', [
        {},
        {'translations': 'nope'},
        {'translations': [{'text': 'only one'}]},
        {'translations': [{'wrong': 'a'}, {'wrong': 'b'}]},
    ])
    def test_malformed_payloads(self, payload):
        provider = DeepLProvider('k', session=make_session(make_response(payload=payload)))
        with pytest.raises(MalformedResponseError):
            provider.translate(['a', 'b'], 'EN', 'ES')

    def test_unsupported_language_never_hits_network(self):
        session = make_session(make_response(payload={'translations': []}))
        with pytest.raises(UnsupportedLanguageError):
            DeepLProvider('k', session=session).translate(['a'], 'EN', 'PT')
        session.post.assert_not_called()


class TestRemoteTranslateProvider:
    def test_posts_json_body(self):
        session = make_session(make_response(payload={'translations': ['Hola']}))
        provider = RemoteTranslateProvider('http://svc/api/translate', timeout=20, session=session)

        assert provider.translate(['Hello'], 'EN', 'ES') == ['Hola']
        session.post.assert_called_once_with(
            'http://svc/api/translate',
            json={'texts': ['Hello'], 'from': 'EN', 'to': 'ES'},
            timeout=20,
        )

    def test_maps_error_statuses(self):
        limited = RemoteTranslateProvider('u', session=make_session(
            make_response(429, payload={'error': 'Too many requests'})))
        with pytest.raises(ProviderRateLimitError):
            limited.translate(['a'], 'EN', 'ES')

        failed = RemoteTranslateProvider('u', session=make_session(
            make_response(500, payload={'error': 'Translation failed', 'details': 'boom'})))
        with pytest.raises(ProviderError) as exc:
            failed.translate(['a'], 'EN', 'ES')
        assert exc.value.status_code == 500
        assert exc.value.details == 'boom'

    def test_invalid_json_is_malformed(self):
        provider = RemoteTranslateProvider('u', session=make_session(make_response(200)))
        with pytest.raises(MalformedResponseError):
            provider.translate(['a'], 'EN', 'ES')


class TestCreateProvider:
    def test_selects_by_service_name(self):
        assert isinstance(create_provider({'TRANSLATION_SERVICE': 'echo'}), EchoProvider)
        assert isinstance(create_provider({'TRANSLATION_SERVICE': 'deepl', 'DEEPL_API_KEY': 'k'}), DeepLProvider)
        assert isinstance(
            create_provider({'TRANSLATION_SERVICE': 'remote', 'TRANSLATE_ENDPOINT': 'http://x'}),
            RemoteTranslateProvider,
        )

    def test_unknown_service(self):
        with pytest.raises(ValueError):
            create_provider({'TRANSLATION_SERVICE': 'babelfish'})
