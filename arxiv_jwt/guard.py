"""
Resolves the principal for a request from its bearer token.

A :class:`Guard` is created for each request and thrown away afterwards. It
looks for a token in the ``Authorization: Bearer <token>`` header or, failing
that, in a ``token`` request parameter, and then checks it in a fixed order:

1. the token parses (otherwise it is *malformed*);
2. the signature verifies (otherwise it is *forged*);
3. the token has not expired;
4. the token has not been revoked;
5. the subject resolves to a principal in the user directory.

Whatever the reason, a rejected token simply means "no principal"; the reason
is only written to the log.
"""

from typing import Any, Mapping, Optional, Union
import logging

from . import events, policy
from .directory import UserDirectory
from .domain import Principal, Token
from .exceptions import InvalidSignature, InvalidToken, MissingToken, \
    RevokedToken, TokenIssueFailed, UnknownSubject
from .manager import TokenManager
from .revocation import NullRevocationList, RevocationList

logger = logging.getLogger(__name__)

TOKEN_PARAMETER = 'token'


class Guard(object):
    """
    Per-request authentication state.

    Parameters
    ----------
    request : :class:`werkzeug.wrappers.Request`
        Anything with ``headers`` and ``values`` mappings will do.
    manager : :class:`.TokenManager`
    directory : :class:`.UserDirectory`
    revocations : :class:`.RevocationList`
        Defaults to :class:`.NullRevocationList`.
    verify_on_refresh : bool
        If ``True`` (the default) a token must carry a valid signature to be
        renewed. If ``False``, an expired token is renewed on the strength
        of its claims alone.
    issuer : str
        Overrides the issuer configured on the manager.

    """

    def __init__(self, request: Any, manager: TokenManager,
                 directory: UserDirectory,
                 revocations: Optional[RevocationList] = None,
                 verify_on_refresh: bool = True,
                 issuer: Optional[str] = None) -> None:
        self.request = request
        self.manager = manager
        self.directory = directory
        self.revocations = revocations if revocations is not None \
            else NullRevocationList()
        self.verify_on_refresh = verify_on_refresh
        self.issuer = issuer
        self.logged_out = False
        self.last_attempted: Optional[Principal] = None
        self._user: Optional[Principal] = None
        self._token: Optional[Token] = None
        self._detected = False

    @property
    def token(self) -> Optional[Token]:
        """The token detected on the request, if any."""
        return self.detect_token()

    def _token_from_header(self) -> Optional[str]:
        header = self.request.headers.get('Authorization')
        if not header:
            return None
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            logger.debug('Authorization header is not a bearer token')
            return None
        return parts[1]

    def _token_from_parameter(self) -> Optional[str]:
        values = getattr(self.request, 'values', None)
        if not values:
            return None
        return values.get(TOKEN_PARAMETER) or None

    def detect_token(self) -> Optional[Token]:
        """
        Find and parse the token on the request.

        The result is cached, so the request is only inspected once.
        """
        if not self._detected:
            self._detected = True
            raw = self._token_from_header() or self._token_from_parameter()
            if raw is None:
                logger.debug('No bearer token on request')
            else:
                self._token = self.manager.parse_token(raw)
        return self._token

    def _find_principal(self, token: Token) -> Principal:
        subject = token.subject
        principal = None
        if subject is not None:
            principal = self.directory.retrieve_by_id(subject)
        if principal is None:
            raise UnknownSubject(f'No principal for subject {subject}')
        return principal

    def _authenticate(self) -> Principal:
        token = self.detect_token()
        if token is None:
            raise MissingToken('No usable bearer token')
        self.manager.check(token)
        if self.revocations.is_revoked(token):
            raise RevokedToken(f'Token {token.token_id} has been revoked')
        return self._find_principal(token)

    def user(self) -> Optional[Principal]:
        """Get the authenticated principal for this request, if any."""
        if self.logged_out:
            return None
        if self._user is not None:
            return self._user
        try:
            principal = self._authenticate()
        except MissingToken:
            return None
        except InvalidSignature as e:
            logger.warning('Rejected bearer token: %s', e)
            return None
        except InvalidToken as e:
            logger.debug('Rejected bearer token: %s', e)
            return None
        except UnknownSubject as e:
            logger.debug('Token subject not found: %s', e)
            return None
        self._user = principal
        return principal

    def check(self) -> bool:
        """Whether a principal is authenticated."""
        return self.user() is not None

    def guest(self) -> bool:
        """Whether no principal is authenticated."""
        return not self.check()

    def id(self) -> Optional[str]:
        """The identifier of the authenticated principal."""
        principal = self.user()
        return principal.user_id if principal is not None else None

    def login(self, principal: Principal) -> None:
        """
        Make ``principal`` the authenticated principal for this request.

        A guard that has been logged out stays logged out.
        """
        events.login.send(self, principal=principal)
        self._user = principal

    def logout(self) -> None:
        """
        Log out for the rest of this request.

        The current token, if it verifies, is handed to the revocation list
        for the remainder of its lifetime. Calling this twice is harmless.
        """
        if self.logged_out:
            return
        principal = self.user()
        token = self._token
        if token is not None and self.manager.valid_token(token):
            ttl = policy.remaining_lifetime(token.claims, self.manager.now())
            self.revocations.revoke(token, ttl)
        events.logout.send(self, principal=principal, token=token)
        self._user = None
        self.logged_out = True

    def _has_valid_credentials(self, principal: Optional[Principal],
                               credentials: Mapping[str, Any]) -> bool:
        return principal is not None \
            and self.directory.validate_credentials(principal, credentials)

    def validate(self, credentials: Mapping[str, Any]) -> bool:
        """Check credentials without logging in."""
        self.last_attempted = principal = \
            self.directory.retrieve_by_credentials(credentials)
        return self._has_valid_credentials(principal, credentials)

    def attempt(self, credentials: Mapping[str, Any]) -> bool:
        """Check credentials and, if they match, log the principal in."""
        events.attempting.send(self, credentials=credentials)
        self.last_attempted = principal = \
            self.directory.retrieve_by_credentials(credentials)
        if self._has_valid_credentials(principal, credentials):
            self.login(principal)
            return True
        events.failed.send(self, principal=principal, credentials=credentials)
        return False

    def issue(self, custom_claims: Optional[Mapping[str, Any]] = None) \
            -> Optional[str]:
        """
        Issue a token for the principal already set on the guard.

        The principal is set by :meth:`login`, :meth:`attempt`, a resolved
        :meth:`user` or :meth:`refresh`. The token on the request is not
        resolved here; use :meth:`refresh` to renew it.

        Returns ``None`` if no principal is set or the token could not be
        signed.
        """
        principal = None if self.logged_out else self._user
        if principal is None:
            return None
        try:
            return self.manager.issue(principal, custom_claims,
                                      issuer=self.issuer)
        except TokenIssueFailed as e:
            logger.error('Could not issue token: %s', e)
            return None

    def refresh(self, token: Union[str, Token, None] = None,
                custom_claims: Optional[Mapping[str, Any]] = None) \
            -> Optional[str]:
        """
        Exchange a token that is live, or expired but within its renewal
        limit, for a new one.

        If ``token`` is not given, the token on the request is used. Returns
        the new token, or ``None`` if the token cannot be renewed.
        """
        if token is None:
            parsed = self.detect_token()
        elif isinstance(token, Token):
            parsed = token
        else:
            parsed = self.manager.parse_token(token)
        if parsed is None:
            return None
        if self.verify_on_refresh and self.manager.invalid_token(parsed):
            logger.warning('Refusing to renew token with a bad signature')
            return None
        if self.revocations.is_revoked(parsed):
            logger.debug('Refusing to renew revoked token %s',
                         parsed.token_id)
            return None
        if not self.manager.can_be_renewed(parsed):
            logger.debug('Token %s is past its renewal limit',
                         parsed.token_id)
            return None
        try:
            principal = self._find_principal(parsed)
        except UnknownSubject as e:
            logger.debug('Cannot renew token: %s', e)
            return None
        self._user = principal
        try:
            return self.manager.issue(principal, custom_claims,
                                      issuer=self.issuer)
        except TokenIssueFailed as e:
            logger.error('Could not renew token: %s', e)
            return None
