"""
User directory: resolves token subjects and credentials to principals.

The guard only depends on the :class:`UserDirectory` protocol; applications
plug in their own user store. :class:`InMemoryDirectory` is provided for
development and tests.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Protocol
import logging

from werkzeug.security import check_password_hash, generate_password_hash

from .domain import Principal, User

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    """Lookup service for principals."""

    def retrieve_by_id(self, identifier: str) -> Optional[Principal]:
        """Get a principal by its stable identifier."""

    def retrieve_by_credentials(self, credentials: Mapping[str, Any]) \
            -> Optional[Principal]:
        """Get the principal the credentials claim to belong to."""

    def validate_credentials(self, principal: Principal,
                             credentials: Mapping[str, Any]) -> bool:
        """Check the credentials against the principal."""


class InMemoryDirectory(object):
    """
    A :class:`UserDirectory` backed by a dict.

    Credentials are mappings with ``username`` and ``password`` keys.
    Passwords are stored as werkzeug password hashes.
    """

    def __init__(self, users: Iterable[User] = ()) -> None:
        self._users: Dict[str, User] = {}
        self._passwords: Dict[str, str] = {}
        for user in users:
            self.add(user)

    def add(self, user: User, password: Optional[str] = None) -> User:
        """Add (or replace) a user, optionally with a password."""
        if user.user_id is None:
            raise ValueError('User has no identifier')
        self._users[str(user.user_id)] = user
        if password is not None:
            self._passwords[str(user.user_id)] = \
                generate_password_hash(password)
        return user

    def retrieve_by_id(self, identifier: str) -> Optional[User]:
        return self._users.get(str(identifier))

    def retrieve_by_credentials(self, credentials: Mapping[str, Any]) \
            -> Optional[User]:
        username = credentials.get('username')
        for user in self._users.values():
            if username and user.username == username:
                return user
        logger.debug('No user with username %s', username)
        return None

    def validate_credentials(self, principal: Principal,
                             credentials: Mapping[str, Any]) -> bool:
        hashed = self._passwords.get(str(principal.user_id))
        password = credentials.get('password')
        if hashed is None or not password:
            return False
        return check_password_hash(hashed, password)
