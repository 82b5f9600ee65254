"""Defines tokens and principals for bearer-token authentication."""

from typing import Any, Dict, Mapping, NamedTuple, Optional, Protocol, \
    runtime_checkable


class Principal(Protocol):
    """Anything that can be the subject of a token."""

    @property
    def user_id(self) -> Optional[str]:
        """Stable identifier, used as the ``sub`` claim."""


@runtime_checkable
class ClaimsContributor(Protocol):
    """A principal that adds its own claims to every token issued for it."""

    def jwt_claims(self) -> Mapping[str, Any]:
        """Extra claims to embed in the token."""


class User(NamedTuple):
    """Represents a user that can be authenticated with a bearer token."""

    username: str
    """Slug-like username."""

    email: str
    """The user's primary e-mail address."""

    user_id: Optional[str] = None
    """Unique identifier for the user. If ``None``, the user does not exist."""


class Token(NamedTuple):
    """
    A parsed, not necessarily verified, bearer token.

    Holds everything needed to check the signature later: the exact bytes
    that were signed and the decoded signature.
    """

    raw: str
    """The serialized token, as presented by the client."""

    header: Dict[str, Any]
    """The JOSE header, e.g. ``{'alg': 'HS256', 'typ': 'JWT', 'jti': ...}``."""

    claims: Dict[str, Any]
    """The claim set carried in the payload."""

    signing_input: bytes
    """The ``header.payload`` segments over which the signature was made."""

    signature: bytes
    """The decoded signature segment."""

    def claim(self, name: str, default: Any = None) -> Any:
        """Get a claim by name."""
        return self.claims.get(name, default)

    @property
    def subject(self) -> Optional[str]:
        """The principal identifier (``sub``)."""
        return self.claims.get('sub')

    @property
    def token_id(self) -> Optional[str]:
        """The token identifier (``jti``)."""
        return self.claims.get('jti', self.header.get('jti'))

    @property
    def expires_at(self) -> Optional[int]:
        """Expiration as UTC epoch seconds (``exp``)."""
        return self.claims.get('exp')

    @property
    def renewal_limit(self) -> Optional[int]:
        """Last instant at which the token may be renewed (``rli``)."""
        return self.claims.get('rli')
