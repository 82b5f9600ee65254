"""Exceptions."""


class ConfigurationError(RuntimeError):
    """The token secret or another required setting is missing or invalid."""


class InvalidToken(ValueError):
    """A bearer token could not be accepted."""


class MalformedToken(InvalidToken):
    """The token string is not a structurally valid JWT."""


class InvalidSignature(InvalidToken):
    """The token signature does not match; likely a forgery."""


class ExpiredToken(InvalidToken):
    """The token is past its expiration time."""


class RevokedToken(InvalidToken):
    """The token was revoked before it expired."""


class MissingToken(ValueError):
    """The request carries no bearer token."""


class UnknownSubject(RuntimeError):
    """The token subject does not resolve to a known user."""


class TokenIssueFailed(RuntimeError):
    """A token could not be built or signed."""
