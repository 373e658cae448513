"""Pytest fixtures: one fresh in-memory database and app per test.

Each test gets its own application (and therefore its own SQLite
``:memory:`` engine), with the media host replaced by an in-memory double.
"""

from __future__ import annotations

import os

import pytest
from accounts.core.config import TestingConfig
from accounts.core.extensions import MEDIA_UPLOADER_KEY, get_token_config
from accounts.core.extensions import db as _db
from accounts.factory import create_app
from accounts.services import ServiceContext, TokenService
from accounts.services._shared.ports import InMemoryMediaUploader, StubTokenProvider


@pytest.fixture()
def app():
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application with :class:`TestingConfig`, an active app context and
        all tables created.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig)
    application.logger.setLevel("WARNING")
    application.extensions[MEDIA_UPLOADER_KEY] = InMemoryMediaUploader()
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app):
    """Database extension bound to the testing application."""
    return _db


@pytest.fixture()
def session(db):
    """The scoped session shared by factories, repositories and services."""
    return db.session


@pytest.fixture()
def client(app):
    """Test client without a cookie jar; tests send cookies explicitly."""
    return app.test_client(use_cookies=False)


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def media(app) -> InMemoryMediaUploader:
    """The media host double installed on ``app``."""
    return app.extensions[MEDIA_UPLOADER_KEY]


@pytest.fixture()
def stub_tokens() -> StubTokenProvider:
    return StubTokenProvider()


@pytest.fixture()
def token_service(app, stub_tokens) -> TokenService:
    """TokenService wired to the deterministic stub provider."""
    return TokenService(
        config=get_token_config(),
        token_provider=stub_tokens,
        ctx=ServiceContext(request_id="test"),
    )


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to the app's session ---------------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper for tests that use the database."""
    from tests.factories import SQLAlchemySession

    if "app" not in request.fixturenames:
        yield
        return
    SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
