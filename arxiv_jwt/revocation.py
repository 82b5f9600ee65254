"""
Token revocation hooks.

Tokens are stateless, so logging out does not invalidate a token by itself.
Whether tokens should be revocable is left to the application: the guard
reports tokens to a :class:`RevocationList` on logout and consults it when
resolving requests. The default, :class:`NullRevocationList`, never revokes
anything, in which case short token lifetimes are the only limit on a stolen
token.
"""

from typing import Dict, Optional, Protocol
import logging
import threading
import time

from .domain import Token

logger = logging.getLogger(__name__)


class RevocationList(Protocol):
    """Records revoked tokens by ``jti``."""

    def revoke(self, token: Token, ttl: int) -> None:
        """Revoke ``token`` for ``ttl`` seconds (its remaining lifetime)."""

    def is_revoked(self, token: Token) -> bool:
        """Whether ``token`` has been revoked."""


class NullRevocationList(object):
    """Never revokes; tokens stay valid until they expire."""

    def revoke(self, token: Token, ttl: int) -> None:
        logger.debug('Revocation is disabled; token %s stays valid',
                     token.token_id)

    def is_revoked(self, token: Token) -> bool:
        return False


class MemoryRevocationList(object):
    """
    In-process revocation list.

    Entries expire together with the tokens they revoke. Only suitable for a
    single worker process; it is safe to share between threads.
    """

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._revoked: Dict[str, float] = {}
        self._lock = threading.Lock()

    def revoke(self, token: Token, ttl: int) -> None:
        if token.token_id is None or ttl <= 0:
            return
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._revoked[token.token_id] = now + ttl

    def is_revoked(self, token: Token) -> bool:
        token_id: Optional[str] = token.token_id
        if token_id is None:
            return False
        with self._lock:
            until = self._revoked.get(token_id)
            if until is None:
                return False
            if until <= self._clock():
                del self._revoked[token_id]
                return False
            return True

    def _prune(self, now: float) -> None:
        """Drop entries whose tokens have expired. Call with the lock held."""
        expired = [token_id for token_id, until in self._revoked.items()
                   if until <= now]
        for token_id in expired:
            del self._revoked[token_id]

    def __len__(self) -> int:
        with self._lock:
            self._prune(self._clock())
            return len(self._revoked)
