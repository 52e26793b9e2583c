"""Service configuration using pydantic-settings.

Values come from environment variables prefixed with ``CV_CHECKER_`` or from
an optional ``.env`` file in the working directory.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


VerificationPolicy = Literal["alignment", "owner_position"]


class Settings(BaseSettings):
    """Central configuration for the CV checker service."""

    model_config = SettingsConfigDict(
        env_prefix="CV_CHECKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Logging ---
    log_level: str = "INFO"

    # --- Crossref lookup ---
    crossref_base_url: str = "https://api.crossref.org"
    crossref_rows: int = Field(default=5, ge=1, le=100)
    crossref_mailto: str = ""
    request_timeout: float = 30.0
    request_max_retries: int = Field(default=3, ge=1)
    request_retry_delay: float = 1.0
    source_name: str = "Crossref"

    # --- Matching / verification ---
    auto_select_margin: float = Field(default=0.1, ge=0.0, le=1.0)
    verification_policy: VerificationPolicy = "alignment"
    lookup_max_workers: int = Field(default=1, ge=1, le=16)

    @property
    def user_agent(self) -> str:
        """User-Agent sent to public bibliographic APIs."""
        if self.crossref_mailto:
            return f"cv-checker/0.1 (mailto:{self.crossref_mailto})"
        return "cv-checker/0.1"


@lru_cache
def get_settings() -> Settings:
    return Settings()
