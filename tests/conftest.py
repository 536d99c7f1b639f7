"""
Pytest configuration and fixtures for testing the translation service.
"""

import os
import sys
import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from linguabatch import create_app, db
from linguabatch.config import TranslationSettings
from linguabatch.services.errors import ProviderError
from linguabatch.services.providers import EchoProvider
from linguabatch.services.scheduler import ManualClock, Scheduler

fake = Faker()


class ScriptedProvider(EchoProvider):
    """Echo provider that raises the queued errors first."""

    def __init__(self, errors=()):
        super().__init__()
        self.errors = list(errors)
        self.attempts = 0

    def translate(self, texts, source, target, timeout=None):
        self.attempts += 1
        if self.errors:
            raise self.errors.pop(0)
        return super().translate(texts, source, target, timeout)


class BrokenProvider:
    """Provider whose every call fails with a transient error."""

    name = 'broken'

    def __init__(self, error=None):
        self.error = error or ProviderError('upstream unavailable', status_code=503)
        self.attempts = 0

    def translate(self, texts, source, target, timeout=None):
        self.attempts += 1
        raise self.error


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


@pytest.fixture(scope='function')
def translation_services(app):
    """Fresh per-app gateway and rate guard; tests may swap the provider."""
    from linguabatch.routes.translate import get_translation_services

    app.extensions.pop('linguabatch', None)
    with app.app_context():
        services = get_translation_services()
    yield services
    app.extensions.pop('linguabatch', None)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock)


@pytest.fixture
def settings():
    return TranslationSettings(
        batch_size=5,
        batch_window=0.2,
        provider_max_batch_size=3,
        provider_chunk_delay=0.1,
        provider_rate_limit=100,
        provider_rate_window=60,
        provider_max_retries=3,
        provider_backoff_base=1.0,
    )


@pytest.fixture
def echo_provider():
    return EchoProvider()


@pytest.fixture
def broken_provider():
    return BrokenProvider()


@pytest.fixture
def ui_strings():
    """A handful of distinct UI strings."""
    return list(dict.fromkeys(fake.sentence(nb_words=3) for _ in range(12)))


@pytest.fixture
def scripted_provider():
    """Factory: ``scripted_provider([error, ...])`` fails with those errors, then echoes."""
    return ScriptedProvider
