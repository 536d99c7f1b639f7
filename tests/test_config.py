from linguabatch.config import TestingConfig, TranslationSettings, config_by_name


def test_settings_from_flask_config(app):
    settings = TranslationSettings.from_config(app.config)
    assert settings.source_language == 'EN'
    assert settings.cache_ttl == 24 * 60 * 60
    assert settings.provider_backoff_base == 0


def test_settings_fall_back_to_defaults():
    settings = TranslationSettings.from_config({})
    assert settings == TranslationSettings()
    assert settings.batch_size == 20
    assert settings.batch_window == 0.2


def test_testing_config_is_selected(app):
    assert config_by_name['testing'] is TestingConfig
    assert app.config['TESTING'] is True
    assert app.config['TRANSLATION_SERVICE'] == 'echo'
