"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for ShopSession happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. session_max_age_ms -> SESSION_MAX_AGE_MS). Type coercion and
      validation are built in.

Session lifetime is configured in milliseconds to match the cookie contract
(86400000 ms = one day). The cookie layer and the session store both read the
seconds form through session_max_age_seconds so they always agree.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
sessions/, or cart/.
"""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("shopsession.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
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
    host: str = "127.0.0.1"
    port: int = 3000

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    session_cookie_name: str = "sessionId"
    session_max_age_ms: int = Field(default=86_400_000, gt=0)
    # False = absolute expiry fixed at creation; True = window resets on access.
    sliding_expiration: bool = False
    session_sweep_interval_seconds: float = Field(default=60, gt=0)
    secure_cookies: bool = False

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def normalize_log_level(self) -> "Settings":
        """Upper-case LOG_LEVEL and force DEBUG output when DEBUG=true."""
        self.log_level = "DEBUG" if self.debug else self.log_level.upper()
        if self.session_max_age_ms < 1000:
            logger.warning(
                "SESSION_MAX_AGE_MS=%d is below one second -- sessions will expire almost immediately",
                self.session_max_age_ms,
            )
        return self

    @property
    def session_max_age_seconds(self) -> float:
        return self.session_max_age_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
