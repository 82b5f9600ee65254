"""Tests for :mod:`arxiv_jwt.tokens`."""

from datetime import datetime
import json

import jwt
import pytest
from jwt.utils import base64url_decode, base64url_encode
from pytz import UTC

from .. import tokens
from ..domain import User
from ..exceptions import MalformedToken, TokenIssueFailed

SECRET = bytes(32)
NOW = datetime(2020, 9, 13, 12, 26, 40, tzinfo=UTC)
T = 1600000000


class ContributingUser(object):
    """A principal that adds its own claims."""

    def __init__(self, user_id, claims=None, error=None):
        self.user_id = user_id
        self._claims = claims or {}
        self._error = error

    def jwt_claims(self):
        if self._error:
            raise self._error
        return self._claims


@pytest.fixture
def user():
    return User(user_id='42', username='foouser', email='foo@foo.com')


def _segment(data: dict) -> str:
    return base64url_encode(json.dumps(data).encode('utf-8')).decode('ascii')


def test_reserved_claims(user):
    """A new token carries the reserved claims, derived from ``now``."""
    token = tokens.issue(user, SECRET, 60, 7200, issuer='https://arxiv.org',
                         now=NOW)
    parsed = tokens.parse(token)
    assert parsed.claims['iss'] == 'https://arxiv.org'
    assert parsed.claims['sub'] == '42'
    assert parsed.claims['iat'] == T
    assert parsed.claims['nbf'] == T
    assert parsed.claims['exp'] == T + 60 * 60
    assert parsed.claims['rli'] == T + (60 + 7200) * 60
    assert len(parsed.claims['jti']) >= 16
    assert parsed.header['jti'] == parsed.claims['jti']
    assert parsed.header['alg'] == 'HS256'
    assert list(parsed.claims)[:3] == ['iss', 'sub', 'jti']


def test_token_ids_are_unique(user):
    """Each token gets its own ``jti``."""
    first = tokens.parse(tokens.issue(user, SECRET, 60, 0, now=NOW))
    second = tokens.parse(tokens.issue(user, SECRET, 60, 0, now=NOW))
    assert first.token_id != second.token_id


def test_numeric_identifier():
    """The subject is always serialized as a string."""
    token = tokens.issue(User(user_id=42, username='u', email='u@u.com'),
                         SECRET, 60, 0, now=NOW)
    assert tokens.parse(token).subject == '42'


def test_no_identifier():
    """A principal without an identifier cannot get a token."""
    with pytest.raises(TokenIssueFailed):
        tokens.issue(User(username='u', email='u@u.com'), SECRET, 60, 0)


def test_unserializable_claim(user):
    """Claims that cannot be encoded fail issuance cleanly."""
    with pytest.raises(TokenIssueFailed):
        tokens.issue(user, SECRET, 60, 0, custom_claims={'foo': object()})


def test_custom_and_principal_claims():
    """Principal claims are applied after caller claims."""
    principal = ContributingUser('7', claims={'role': 'admin', 'lang': 'en'})
    token = tokens.issue(principal, SECRET, 60, 0, now=NOW,
                         custom_claims={'role': 'user', 'scope': 'read'})
    claims = tokens.parse(token).claims
    assert claims['role'] == 'admin'
    assert claims['lang'] == 'en'
    assert claims['scope'] == 'read'


def test_contributor_error_is_ignored():
    """A principal failing to contribute claims still gets a token."""
    principal = ContributingUser('7', error=RuntimeError('db is down'))
    token = tokens.issue(principal, SECRET, 60, 0, now=NOW,
                         custom_claims={'scope': 'read'})
    parsed = tokens.parse(token)
    assert parsed.subject == '7'
    assert parsed.claims['scope'] == 'read'
    assert tokens.verify_signature(parsed, SECRET)


def test_verify_signature(user):
    """The signature verifies with the same secret only."""
    parsed = tokens.parse(tokens.issue(user, SECRET, 60, 0, now=NOW))
    assert tokens.verify_signature(parsed, SECRET)
    assert not tokens.verify_signature(parsed, b'x' * 32)


def test_tampered_signature(user):
    """Flipping any bit of the signature breaks verification, not parsing."""
    token = tokens.issue(user, SECRET, 60, 0, now=NOW)
    signing_input, signature_segment = token.rsplit('.', 1)
    signature = base64url_decode(signature_segment.encode('ascii'))
    for bit in range(len(signature) * 8):
        tampered = bytearray(signature)
        tampered[bit // 8] ^= 1 << (bit % 8)
        forged = signing_input + '.' \
            + base64url_encode(bytes(tampered)).decode('ascii')
        parsed = tokens.parse(forged)
        assert not tokens.verify_signature(parsed, SECRET), f'bit {bit}'


def test_tampered_payload(user):
    """Changing the claims invalidates the signature."""
    token = tokens.issue(user, SECRET, 60, 0, now=NOW)
    header, payload, signature = token.split('.')
    claims = tokens.parse(token).claims
    claims['sub'] = '1'
    forged = '.'.join([header, _segment(claims), signature])
    assert tokens.parse(forged).subject == '1'
    assert not tokens.verify_signature(tokens.parse(forged), SECRET)


def test_unsigned_token(user):
    """A token with ``alg: none`` never verifies."""
    claims = tokens.parse(tokens.issue(user, SECRET, 60, 0, now=NOW)).claims
    unsigned = jwt.encode(claims, None, algorithm='none')
    parsed = tokens.parse(unsigned)
    assert parsed.header['alg'] == 'none'
    assert not tokens.verify_signature(parsed, SECRET)


def test_round_trip():
    """Parsing reproduces the claims of a token built elsewhere."""
    claims = {'iss': 'https://arxiv.org', 'sub': '42', 'jti': 'a' * 32,
              'iat': T, 'nbf': T, 'exp': T + 3600, 'rli': T + 435600}
    parsed = tokens.parse(jwt.encode(claims, SECRET, algorithm='HS256'))
    assert parsed.claims == claims
    assert tokens.verify_signature(parsed, SECRET)


def test_interoperable(user):
    """Tokens verify with an independent JWT implementation."""
    token = tokens.issue(user, SECRET, 60, 7200, issuer='https://arxiv.org')
    claims = jwt.decode(token, SECRET, algorithms=['HS256'],
                        issuer='https://arxiv.org')
    assert claims['sub'] == '42'


@pytest.mark.parametrize('raw', [
    '',
    'notatoken',
    'foo.bar',
    'foo.bar.baz',
    'a.b.c.d',
    '..',
    _segment({'alg': 'HS256'}) + '.bm90anNvbg.c2ln',
    _segment({'typ': 'JWT'}) + '.' + _segment({'sub': '1'}) + '.c2ln',
    _segment({'alg': 'HS256'}) + '.' + base64url_encode(b'[1, 2]').decode()
    + '.c2ln',
])
def test_malformed(raw):
    """Structurally broken tokens raise :class:`MalformedToken`."""
    with pytest.raises(MalformedToken):
        tokens.parse(raw)


def test_not_a_string():
    """Only strings are tokens."""
    with pytest.raises(MalformedToken):
        tokens.parse(None)
