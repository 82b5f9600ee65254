"""
Stateless bearer-token authentication for Flask applications.

Tokens are HS256-signed JWTs carrying the user identifier (``sub``), an
expiration (``exp``) and a renewal limit (``rli``) after which an expired
token can no longer be exchanged for a fresh one.

Quick start
-----------

.. code-block:: python

   # yourapp/factory.py
   from flask import Flask
   from arxiv_jwt import JWTAuth
   from yourapp.services import users


   def create_web_app() -> Flask:
       app = Flask('foo')
       app.config['JWT_SECRET'] = 'base64:...'   # See generate-jwt-secret.
       JWTAuth(app, directory=users.directory)
       return app

In a route, :func:`current_guard` gives access to the
:class:`.guard.Guard` for the current request:

.. code-block:: python

   from arxiv_jwt import current_guard

   @blueprint.route('/token/refresh', methods=['POST'])
   def refresh():
       token = current_guard().refresh()
       if token is None:
           raise Unauthorized('Token cannot be renewed')
       return jsonify(token=token)

Set ``JWT_AUTH_DEBUG`` (config or environment) to get auth debugging in the
logs.
"""

from typing import Optional
import logging
import os

from flask import Flask, g, request

from . import config, directory, events, guard, keys, manager, policy, \
    revocation, tokens
from .directory import InMemoryDirectory, UserDirectory
from .domain import ClaimsContributor, Principal, Token, User
from .exceptions import ConfigurationError
from .guard import Guard
from .manager import TokenManager
from .revocation import RevocationList

logger = logging.getLogger(__name__)


class JWTAuth(object):
    """
    Attaches a :class:`.Guard` to each request.

    The token manager is built when the extension is installed, so a
    missing or weak ``JWT_SECRET`` stops the application from starting.
    """

    def __init__(self, app: Optional[Flask] = None,
                 directory: Optional[UserDirectory] = None,
                 revocations: Optional[RevocationList] = None) -> None:
        """
        Initialize ``app`` with :class:`JWTAuth`.

        Parameters
        ----------
        app : :class:`Flask`
        directory : :class:`.UserDirectory`
            Resolves token subjects to principals.
        revocations : :class:`.RevocationList`
            Optional; tokens are never revoked if not given.

        """
        self.directory = directory
        self.revocations = revocations
        self.manager: Optional[TokenManager] = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """
        Build the token manager and register :meth:`.load_guard`.

        Raises
        ------
        :class:`.ConfigurationError`
            Raised if the secret is missing or too short, or if no user
            directory was provided.

        """
        if self.directory is None:
            raise ConfigurationError('JWTAuth requires a user directory')
        self.app = app
        config.init_app(app)
        self.manager = TokenManager.from_config(app.config)
        app.config['arxiv_jwt.JWTAuth'] = self
        app.before_request(self.load_guard)

        if config.as_bool(app.config, 'JWT_AUTH_DEBUG') \
                or config.is_true(os.getenv('JWT_AUTH_DEBUG', '')):
            self.auth_debug()
            logger.debug('JWT_AUTH_DEBUG is set; auth debug logging is on')

    def load_guard(self) -> None:
        """Create the guard for the current request."""
        issuer = self.app.config.get('JWT_ISSUER') \
            or request.host_url.rstrip('/')
        g.guard = Guard(
            request._get_current_object(),
            self.manager,
            self.directory,
            revocations=self.revocations,
            verify_on_refresh=config.as_bool(self.app.config,
                                             'JWT_REFRESH_VERIFY_SIGNATURE'),
            issuer=issuer
        )

    def auth_debug(self) -> None:
        """Set the package loggers to DEBUG."""
        from . import decorators
        for module in (guard, manager, tokens, revocation, directory,
                       decorators):
            module.logger.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)


def current_guard() -> Guard:
    """Get the :class:`.Guard` for the current request."""
    _guard: Optional[Guard] = g.get('guard')
    if _guard is None:
        raise RuntimeError('JWTAuth is not installed on this application')
    return _guard
