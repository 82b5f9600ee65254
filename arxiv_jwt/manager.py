"""
The token manager ties the secret, the codec and the policy together.

A :class:`TokenManager` is built once per application (the secret is
validated at that moment, so a bad configuration stops the application from
starting) and is shared read-only between requests.
"""

from typing import Any, Callable, Mapping, Optional
from datetime import datetime
import logging

from pytz import UTC

from . import keys, policy, tokens
from .domain import Principal, Token
from .exceptions import ExpiredToken, InvalidSignature, MalformedToken

logger = logging.getLogger(__name__)

DEFAULT_TTL = 60
"""Token lifetime, in minutes."""

DEFAULT_REFRESH_LIMIT = 7200
"""Renewal grace period after expiration, in minutes (5 days)."""


def utcnow() -> datetime:
    """Get the current time in UTC."""
    return datetime.now(tz=UTC)


class TokenManager(object):
    """Issues, parses and checks bearer tokens."""

    def __init__(self, secret: Any, ttl: int = DEFAULT_TTL,
                 refresh_limit: int = DEFAULT_REFRESH_LIMIT,
                 issuer: Optional[str] = None,
                 clock: Callable[[], datetime] = utcnow) -> None:
        """
        Load the secret and configure token lifetimes.

        Raises
        ------
        :class:`.ConfigurationError`
            Raised if the secret is missing or too short.

        """
        self._secret = keys.load_secret(secret)
        self.ttl = int(ttl)
        self.refresh_limit = int(refresh_limit)
        self.issuer = issuer
        self.clock = clock

    @classmethod
    def from_config(cls, config: Mapping[str, Any],
                    clock: Callable[[], datetime] = utcnow) -> 'TokenManager':
        """Create a manager from an application config mapping."""
        return cls(config.get('JWT_SECRET'),
                   ttl=int(config.get('JWT_TTL', DEFAULT_TTL)),
                   refresh_limit=int(config.get('JWT_REFRESH_LIMIT',
                                                DEFAULT_REFRESH_LIMIT)),
                   issuer=config.get('JWT_ISSUER'),
                   clock=clock)

    def now(self) -> datetime:
        """The current time according to this manager's clock."""
        return self.clock()

    def issue(self, principal: Principal,
              custom_claims: Optional[Mapping[str, Any]] = None,
              issuer: Optional[str] = None) -> str:
        """Issue a new token for ``principal``."""
        token = tokens.issue(principal, self._secret, self.ttl,
                             self.refresh_limit,
                             issuer=issuer if issuer is not None
                             else self.issuer,
                             custom_claims=custom_claims,
                             now=self.now())
        logger.debug('Issued token for subject %s', principal.user_id)
        return token

    def parse_token(self, raw: str) -> Optional[Token]:
        """Parse a token string, or return ``None`` if it is malformed."""
        try:
            return tokens.parse(raw)
        except MalformedToken as e:
            logger.debug('Malformed token: %s', e)
            return None

    def valid_token(self, token: Token) -> bool:
        """Whether the token signature verifies. Expiration is not checked."""
        return tokens.verify_signature(token, self._secret)

    def invalid_token(self, token: Token) -> bool:
        """Whether the token signature fails to verify."""
        return not self.valid_token(token)

    def expired(self, token: Token) -> bool:
        """Whether the token is past its expiration time."""
        return policy.is_expired(token.claims, self.now())

    def can_be_renewed(self, token: Token) -> bool:
        """Whether the token may still be exchanged for a new one."""
        return policy.can_be_renewed(token.claims, self.now())

    def check(self, token: Token) -> Token:
        """
        Verify the signature, then the expiration, of ``token``.

        Raises
        ------
        :class:`.InvalidSignature`
        :class:`.ExpiredToken`

        """
        if self.invalid_token(token):
            raise InvalidSignature('Token signature does not verify')
        if self.expired(token):
            raise ExpiredToken('Token has expired')
        return token
