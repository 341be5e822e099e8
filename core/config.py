"""
core/config.py -- Character Vault settings (pydantic-settings).

Every environment variable the service reads is a field on Settings. Other
modules take values from get_settings() rather than os.environ.

  get_settings() is wrapped in lru_cache, so Settings is built once per
      process; tests reset it with get_settings.cache_clear().

  Field names map one-to-one onto env vars (token_expire_seconds ->
      TOKEN_EXPIRE_SECONDS); a .env file in the working directory is read too.

  The API lifespan passes the Settings object to TokenIssuer.from_settings().
      Nothing under auth/ looks up the signing secret by itself.

Signing secret policy:
  SECRET_KEY must be at least 32 characters in every mode.

  With DEBUG unset or false, a missing SECRET_KEY stops startup. With
  DEBUG=true a random key is generated and outstanding tokens die on restart.

Layer rule: core/ imports nothing from api/, auth/, or characters/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("charvault.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'charvault.db'}"

SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """Process-wide configuration.

    Every field has a default, so tests can build Settings(_env_file=None, ...)
    with only the values they care about. validate_secret_key() runs last.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    token_algorithm: str = "HS512"
    # 24 hours. There is no refresh flow; clients log in again after expiry.
    token_expire_seconds: int = 86400

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = []

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    register_rate_limit: str = "5/minute"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("token_algorithm")
    @classmethod
    def validate_algorithm(cls, value: str) -> str:
        value = value.upper()
        if value not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"TOKEN_ALGORITHM must be one of: {', '.join(SUPPORTED_ALGORITHMS)}")
        return value

    @field_validator("token_expire_seconds")
    @classmethod
    def validate_expiry(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return value

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
