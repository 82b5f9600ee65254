"""
Functions for working with bearer tokens on user requests.

Tokens are HS256-signed JWTs in the usual compact serialization
(``header.payload.signature``). Structural parsing (:func:`parse`) and
signature verification (:func:`verify_signature`) are kept apart so that
callers can tell a malformed token from a forged one, and both from an
expired one (see :mod:`.policy`).
"""

from typing import Any, Dict, Mapping, Optional
from datetime import datetime
import binascii
import logging
import uuid

import jwt
from jwt.algorithms import HMACAlgorithm
from jwt.utils import base64url_decode
from pytz import UTC

from . import policy
from .domain import ClaimsContributor, Principal, Token
from .exceptions import MalformedToken, TokenIssueFailed

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'

_HMAC = HMACAlgorithm(HMACAlgorithm.SHA256)

# Parsing is structural only; nothing about the claims is checked here.
_UNVERIFIED = {
    'verify_signature': False,
    'verify_exp': False,
    'verify_nbf': False,
    'verify_iat': False,
    'verify_aud': False,
    'verify_iss': False,
    'verify_sub': False,
    'verify_jti': False,
}


def generate_id() -> str:
    """Generate a token identifier (``jti``)."""
    return uuid.uuid4().hex


def principal_claims(principal: Principal) -> Dict[str, Any]:
    """
    Collect the claims a principal contributes to its own tokens.

    Principals that do not implement :class:`.ClaimsContributor` contribute
    nothing. Errors raised while collecting claims are logged and ignored;
    they must never prevent a token from being issued.
    """
    if not isinstance(principal, ClaimsContributor):
        return {}
    try:
        return dict(principal.jwt_claims() or {})
    except Exception as e:
        logger.warning('Ignoring claims from principal %s: %s',
                       getattr(principal, 'user_id', None), e)
        return {}


def issue(principal: Principal, secret: bytes, ttl: int, refresh_limit: int,
          issuer: Optional[str] = None,
          custom_claims: Optional[Mapping[str, Any]] = None,
          now: Optional[datetime] = None) -> str:
    """
    Build and sign a new token for ``principal``.

    Parameters
    ----------
    principal : :class:`.Principal`
    secret : bytes
        Signing secret, see :func:`.keys.load_secret`.
    ttl : int
        Token lifetime in minutes.
    refresh_limit : int
        Renewal grace period after expiration, in minutes.
    issuer : str
        Value of the ``iss`` claim.
    custom_claims : dict
        Extra claims. Claims contributed by the principal are applied after
        these, and both are applied after the reserved claims.
    now : datetime
        Time of issuance. Defaults to the current UTC time.

    Returns
    -------
    str
        The signed token.

    Raises
    ------
    :class:`TokenIssueFailed`
        Raised if the principal has no identifier or the claims cannot be
        encoded.

    """
    if principal.user_id is None:
        raise TokenIssueFailed('Principal has no identifier')
    if now is None:
        now = datetime.now(tz=UTC)

    token_id = generate_id()
    claims: Dict[str, Any] = {}
    if issuer is not None:
        claims['iss'] = issuer
    claims['sub'] = str(principal.user_id)
    claims['jti'] = token_id
    claims.update(policy.time_claims(now, ttl, refresh_limit))
    claims.update(custom_claims or {})
    claims.update(principal_claims(principal))

    try:
        return jwt.encode(claims, secret, algorithm=ALGORITHM,
                          headers={'jti': token_id})
    except (TypeError, ValueError, jwt.exceptions.PyJWTError) as e:
        raise TokenIssueFailed(f'Could not sign token: {e}') from e


def parse(raw: str) -> Token:
    """
    Decode a token string without verifying it.

    Raises
    ------
    :class:`MalformedToken`
        Raised if the string is not a three-segment JWT with a JSON header
        (declaring an algorithm) and a JSON object payload.

    """
    if not isinstance(raw, str) or raw.count('.') != 2:
        raise MalformedToken('Token must have three segments')
    try:
        signing_input, signature_segment = raw.rsplit('.', 1)
        signed = signing_input.encode('ascii')
        header = jwt.get_unverified_header(raw)
        claims = jwt.decode(raw, options=_UNVERIFIED)
        signature = base64url_decode(signature_segment.encode('ascii'))
    except (jwt.exceptions.PyJWTError, binascii.Error, UnicodeError) as e:
        raise MalformedToken(f'Token could not be decoded: {e}') from e
    if not header.get('alg'):
        raise MalformedToken('Token header does not declare an algorithm')
    return Token(raw=raw, header=header, claims=claims,
                 signing_input=signed,
                 signature=signature)


def verify_signature(token: Token, secret: bytes) -> bool:
    """
    Check the token signature against ``secret``.

    Only the signature is checked, never the expiration. Tokens that declare
    any algorithm other than HS256 (including ``none``) do not verify. The
    comparison runs in constant time.
    """
    if token.header.get('alg') != ALGORITHM:
        return False
    key = _HMAC.prepare_key(secret)
    return bool(_HMAC.verify(token.signing_input, key, token.signature))
