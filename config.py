"""
Runtime configuration.

All settings are read once at startup from the environment (optionally
seeded from a .env file) and handed to create_app(). Nothing else in the
service looks at os.environ.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from errors import ConfigError

_FALSY = {"0", "false", "no", "off"}


def _env(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return None


class Settings(BaseModel):
    mongo_uri: str
    database_name: Optional[str] = None
    auth_enabled: bool = True
    token_secret: Optional[str] = None
    token_ttl_days: int = Field(7, ge=1)
    bcrypt_rounds: int = Field(12, ge=4, le=31)
    rate_limit_max: int = Field(100, ge=0)
    rate_limit_window_seconds: int = Field(900, ge=1)
    cors_origins: List[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 10000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from the environment, failing on missing secrets."""
        if dotenv:
            load_dotenv()

        mongo_uri = _env("MONGO_URI", "DATABASE_URL")
        auth_enabled = (_env("AUTH_ENABLED") or "true").lower() not in _FALSY
        token_secret = _env("TOKEN_SECRET", "JWT_SECRET")

        missing = []
        if not mongo_uri:
            missing.append("MONGO_URI")
        if auth_enabled and not token_secret:
            missing.append("TOKEN_SECRET")
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        values = {
            "mongo_uri": mongo_uri,
            "database_name": _env("DATABASE_NAME"),
            "auth_enabled": auth_enabled,
            "token_secret": token_secret,
            "host": _env("HOST") or "0.0.0.0",
            "log_level": (_env("LOG_LEVEL") or "INFO").upper(),
        }
        for field, name in (
            ("token_ttl_days", "TOKEN_TTL_DAYS"),
            ("bcrypt_rounds", "BCRYPT_ROUNDS"),
            ("rate_limit_max", "RATE_LIMIT_MAX"),
            ("rate_limit_window_seconds", "RATE_LIMIT_WINDOW_SECONDS"),
            ("port", "PORT"),
        ):
            raw = _env(name)
            if raw is None:
                continue
            try:
                values[field] = int(raw)
            except ValueError:
                raise ConfigError(f"{name} must be an integer, got {raw!r}")

        origins = _env("CORS_ORIGINS")
        if origins:
            values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")
