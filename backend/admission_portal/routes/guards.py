import logging
from collections import namedtuple
from functools import wraps

from flask import request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from ..errors import Forbidden, InvalidToken
from ..models import ROLE_ADMIN, ROLES

log = logging.getLogger(__name__)

Identity = namedtuple("Identity", ["subject_id", "role"])


def authenticated():
    """
    Verify the bearer token. Missing, malformed and expired tokens are
    answered with 401 by the JWT error loaders registered in create_app.
    """
    verify_jwt_in_request()
    subject_id = get_jwt_identity()
    if not isinstance(subject_id, str) or not subject_id or get_jwt().get("role") not in ROLES:
        raise InvalidToken()


authenticated.provides_identity = True


def admin_only():
    # get_jwt() raises RuntimeError when no token was verified for this request.
    identity = current_identity()
    if identity.role != ROLE_ADMIN:
        log.info("Forbidden: %s %s by %s (%s)", request.method, request.path, identity.subject_id, identity.role)
        raise Forbidden()


admin_only.requires_identity = True


def guarded(*checks):
    """
    Run `checks` in order before the view. Each check either returns or
    raises, which stops the chain. A check that needs an identity must
    come after one that provides it.
    """
    has_identity = False
    for check in checks:
        if getattr(check, "requires_identity", False) and not has_identity:
            raise ValueError(f"{check.__name__} must be composed after an authentication check")
        has_identity = has_identity or getattr(check, "provides_identity", False)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            for check in checks:
                check()
            return fn(*args, **kwargs)
        return wrapper
    return decorator


login_required = guarded(authenticated)
admin_required = guarded(authenticated, admin_only)


def current_identity() -> Identity:
    claims = get_jwt()
    return Identity(get_jwt_identity(), claims["role"])
