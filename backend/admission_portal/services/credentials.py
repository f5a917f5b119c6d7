import logging

from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import InternalError

log = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Salted one-way hash; each call draws a fresh salt."""
    try:
        return generate_password_hash(password)
    except (TypeError, ValueError) as exc:
        log.exception("Password hashing failed")
        raise InternalError("Error while hashing password") from exc


def verify_password(password: str, stored_hash) -> bool:
    # Malformed or missing hashes read as a plain mismatch.
    if not stored_hash or not isinstance(stored_hash, str) or not isinstance(password, str):
        return False
    try:
        return check_password_hash(stored_hash, password)
    except (TypeError, ValueError):
        return False
