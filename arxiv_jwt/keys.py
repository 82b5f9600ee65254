"""
Loading and generating the shared secret used to sign tokens.

Secrets may be configured either as raw text or in a base64-wrapped form,
``base64:<data>``, which is what ``generate-jwt-secret`` writes. Either way
the decoded secret must be at least :data:`MIN_SECRET_LENGTH` bytes long.
"""

from typing import Union
import binascii
import os
from base64 import b64encode, b64decode

from .exceptions import ConfigurationError

BASE64_PREFIX = 'base64:'
MIN_SECRET_LENGTH = 16
"""Minimum secret size in bytes (128 bits)."""

DEFAULT_SECRET_LENGTH = 32


def decode_secret(raw: Union[str, bytes]) -> bytes:
    """Unwrap a ``base64:``-prefixed secret, or encode a raw one to bytes."""
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8')
    if raw.startswith(BASE64_PREFIX):
        try:
            return b64decode(raw[len(BASE64_PREFIX):], validate=True)
        except (binascii.Error, ValueError) as e:
            raise ConfigurationError('JWT secret is not valid base64') from e
    return raw.encode('utf-8')


def load_secret(raw: Union[str, bytes, None]) -> bytes:
    """
    Load and validate a signing secret.

    Parameters
    ----------
    raw : str or bytes
        The configured secret, optionally prefixed with ``base64:``.

    Returns
    -------
    bytes

    Raises
    ------
    :class:`ConfigurationError`
        Raised if the secret is missing, cannot be decoded, or is shorter than
        :data:`MIN_SECRET_LENGTH` bytes once decoded.

    """
    if not raw:
        raise ConfigurationError('JWT secret is not set; use'
                                 ' generate-jwt-secret to create one')
    secret = decode_secret(raw)
    if len(secret) < MIN_SECRET_LENGTH:
        raise ConfigurationError(
            f'JWT secret is too short ({len(secret)} bytes); at least'
            f' {MIN_SECRET_LENGTH} bytes are required'
        )
    return secret


def generate_secret(length: int = DEFAULT_SECRET_LENGTH) -> str:
    """Generate a random secret in the ``base64:`` wrapped form."""
    return BASE64_PREFIX + b64encode(os.urandom(length)).decode('ascii')
