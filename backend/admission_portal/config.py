import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_DB_NAME = "admission_portal"
DEFAULT_PORT = 8080
DEFAULT_CORS_ORIGINS = "http://localhost:5173"


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    mongodb_uri: str
    admin_secret: str = ""
    mongodb_db: str = DEFAULT_DB_NAME
    port: int = DEFAULT_PORT
    cors_origins: tuple = field(default=(DEFAULT_CORS_ORIGINS,))
    log_level: str = "INFO"


def _required(env, name: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise ConfigError(f"{name} environment variable is not set")
    return value


def load_settings(env=None) -> Settings:
    """
    Read process-wide settings once at startup.

    When `env` is None the process environment is used, after loading a
    local .env file if one exists.
    """
    if env is None:
        load_dotenv()
        env = os.environ

    port_raw = env.get("PORT") or str(DEFAULT_PORT)
    try:
        port = int(port_raw)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {port_raw!r}") from None

    log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

    origins = (env.get("CORS_ORIGINS") or DEFAULT_CORS_ORIGINS).split(",")
    origins = tuple(o.strip() for o in origins if o.strip())

    return Settings(
        jwt_secret=_required(env, "JWT_SECRET"),
        mongodb_uri=_required(env, "MONGODB_URI"),
        admin_secret=(env.get("ADMIN_SECRET") or "").strip(),
        mongodb_db=env.get("MONGODB_DB") or DEFAULT_DB_NAME,
        port=port,
        cors_origins=origins,
        log_level=log_level,
    )
