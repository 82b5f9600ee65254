"""
Signals sent by the :class:`.guard.Guard` during authentication.

Listeners subscribe the same way as for Flask's own signals:

.. code-block:: python

   from arxiv_jwt import events

   @events.login.connect
   def audit_login(guard, principal, **extra):
       audit_log.info('login %s', principal.user_id)

Each signal is sent with the guard as sender.
"""

from blinker import Namespace

signals = Namespace()

attempting = signals.signal('attempting')
"""Sent before credentials are checked. Receives ``credentials``."""

failed = signals.signal('failed')
"""Sent when a credential attempt fails.

Receives ``principal`` and ``credentials``.
"""

login = signals.signal('login')
"""Sent when a principal is logged in. Receives ``principal``."""

logout = signals.signal('logout')
"""Sent on explicit logout. Receives ``principal`` and ``token``."""
