"""
Route protection for Flask views.

:func:`authenticated` generates a decorator that requires a principal to be
resolved from the request's bearer token before the view is called. An
optional authorizer function adds application-specific checks, with the
signature ``(principal, *args, **kwargs) -> bool`` where ``*args`` and
``**kwargs`` are the view arguments:

.. code-block:: python

   from arxiv_jwt.decorators import authenticated


   def is_owner(principal, user_id: str, **kwargs) -> bool:
       return principal.user_id == user_id


   @blueprint.route('/<string:user_id>/profile', methods=['GET'])
   @authenticated(authorizer=is_owner)
   def get_profile(user_id: str):
       ...

"""

from typing import Any, Callable, Optional
from functools import wraps
import logging

from werkzeug.exceptions import Forbidden, Unauthorized

from . import current_guard

logger = logging.getLogger(__name__)


def authenticated(authorizer: Optional[Callable] = None) -> Callable:
    """
    Generate a decorator that requires an authenticated principal.

    Raises
    ------
    :class:`.Unauthorized`
        From the decorated view, when no principal can be resolved.
    :class:`.Forbidden`
        From the decorated view, when ``authorizer`` returns ``False``.

    """
    def protector(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            principal = current_guard().user()
            if principal is None:
                logger.debug('No authenticated principal; aborting')
                raise Unauthorized('Not a valid token')
            if authorizer and not authorizer(principal, *args, **kwargs):
                logger.debug('Authorizer returned negative result')
                raise Forbidden('Access denied')
            return func(*args, **kwargs)
        return wrapper
    return protector
