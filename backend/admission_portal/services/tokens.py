"""
Identity tokens.

Tokens are HS256 JWTs minted by flask-jwt-extended. The identity claim is
renamed to ``user_id`` (JWT_IDENTITY_CLAIM) and the role rides along as an
additional claim, so the payload reads {"user_id", "role", "exp", ...}.
Both functions need an application context.
"""
import logging
from datetime import timedelta

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError

from ..errors import InvalidToken, TokenIssueError
from ..models import ROLES

log = logging.getLogger(__name__)

TOKEN_LIFETIME = timedelta(hours=24)


def issue_token(identity: dict, expires_delta: timedelta | None = None) -> str:
    if not current_app.config.get("JWT_SECRET_KEY"):
        raise TokenIssueError()

    role = identity.get("role")
    if role not in ROLES:
        raise TokenIssueError()

    return create_access_token(
        identity=str(identity["_id"]),
        additional_claims={"role": role},
        expires_delta=expires_delta or TOKEN_LIFETIME,
    )


def verify_token(token: str) -> tuple[str, str]:
    """Return (subject_id, role) or raise InvalidToken."""
    if not token or not current_app.config.get("JWT_SECRET_KEY"):
        raise InvalidToken()
    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException) as exc:
        log.debug("Token rejected: %s", exc)
        raise InvalidToken() from exc

    subject_id = claims.get("user_id")
    role = claims.get("role")
    if not isinstance(subject_id, str) or not subject_id or role not in ROLES:
        raise InvalidToken()
    return subject_id, role
