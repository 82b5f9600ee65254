"""Configuration defaults for bearer-token authentication."""

from typing import Any, Mapping
import os

TRUE_VALUES = ('1', 'true', 'yes', 'on')


def is_true(value: str) -> bool:
    """Read a flag from a string such as an environment variable."""
    return value.strip().lower() in TRUE_VALUES


JWT_SECRET = os.environ.get('JWT_SECRET')
"""Signing secret, raw or ``base64:``-wrapped. Required."""

JWT_TTL = int(os.environ.get('JWT_TTL', '60'))
"""Token lifetime, in minutes."""

JWT_REFRESH_LIMIT = int(os.environ.get('JWT_REFRESH_LIMIT', '7200'))
"""How long after expiration a token may still be renewed, in minutes."""

JWT_ISSUER = os.environ.get('JWT_ISSUER')
"""Value of the ``iss`` claim. Defaults to the host URL of the request."""

JWT_REFRESH_VERIFY_SIGNATURE = \
    is_true(os.environ.get('JWT_REFRESH_VERIFY_SIGNATURE', '1'))
"""Require a valid signature before renewing a token."""

JWT_AUTH_DEBUG = is_true(os.environ.get('JWT_AUTH_DEBUG', '0'))
"""Turn the package loggers up to DEBUG."""

_DEFAULTS = {
    'JWT_SECRET': JWT_SECRET,
    'JWT_TTL': JWT_TTL,
    'JWT_REFRESH_LIMIT': JWT_REFRESH_LIMIT,
    'JWT_ISSUER': JWT_ISSUER,
    'JWT_REFRESH_VERIFY_SIGNATURE': JWT_REFRESH_VERIFY_SIGNATURE,
    'JWT_AUTH_DEBUG': JWT_AUTH_DEBUG,
}


def init_app(app: Any) -> None:
    """Set default configuration parameters for an application instance."""
    for key, value in _DEFAULTS.items():
        app.config.setdefault(key, value)


def as_bool(config: Mapping[str, Any], key: str) -> bool:
    """Read a flag that may have been set as a string."""
    value = config.get(key)
    if isinstance(value, str):
        return is_true(value)
    return bool(value)
