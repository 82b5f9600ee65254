from base64 import b64encode
from datetime import datetime, timedelta

import pytest
from flask import Flask
from pytz import UTC
from werkzeug.test import EnvironBuilder

from arxiv_jwt import JWTAuth
from arxiv_jwt.directory import InMemoryDirectory
from arxiv_jwt.domain import User
from arxiv_jwt.guard import Guard
from arxiv_jwt.manager import TokenManager

ZERO_SECRET = 'base64:' + b64encode(bytes(32)).decode('ascii')


class FakeClock(object):
    """A clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def secret():
    return ZERO_SECRET


@pytest.fixture
def clock():
    return FakeClock(datetime(2020, 9, 13, 12, 26, 40, tzinfo=UTC))


@pytest.fixture
def user():
    return User(user_id='42', username='foouser', email='foo@foo.com')


@pytest.fixture
def directory(user):
    _directory = InMemoryDirectory()
    _directory.add(user, password='foopassword')
    return _directory


@pytest.fixture
def manager(secret, clock):
    return TokenManager(secret, ttl=60, refresh_limit=7200,
                        issuer='https://arxiv.org', clock=clock)


@pytest.fixture
def make_guard(manager, directory):
    """Build a guard around a request with the given headers/parameters."""
    def _make_guard(headers=None, query_string=None, **kwargs):
        request = EnvironBuilder(headers=headers,
                                 query_string=query_string).get_request()
        return Guard(request, manager, directory, **kwargs)
    return _make_guard


@pytest.fixture
def app(secret, directory):
    app = Flask('test_jwt_app')
    app.config['JWT_SECRET'] = secret
    app.config['JWT_TTL'] = 60
    app.config['JWT_REFRESH_LIMIT'] = 7200
    JWTAuth(app, directory=directory)
    return app
