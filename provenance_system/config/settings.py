"""Unified configuration and settings module.

Single source of truth for provider credentials, verification policy and
runtime budgets. Values come from the environment (or a local ``.env``).
"""

from __future__ import annotations
from functools import lru_cache
from typing import FrozenSet, Literal, Optional
import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Status codes that count as "reachable" even though they are not 2xx/3xx.
# Many outlets answer automated HEAD requests with 403 while serving the page
# to browsers. Disable with TREAT_403_AS_VALID=false.
ACCEPTED_BLOCK_STATUSES: FrozenSet[int] = frozenset({403})

DEFAULT_PROBE_USER_AGENT = "Mozilla/5.0 (compatible; ProvenanceBot/1.0)"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # ==== Research provider ====
    PERPLEXITY_API_KEY: Optional[str] = None
    PERPLEXITY_API_URL: str = "https://api.perplexity.ai/chat/completions"
    PERPLEXITY_MODEL: str = "sonar-pro"
    UPSTREAM_TIMEOUT_SECONDS: float = Field(60.0, gt=0)

    # ==== URL verification ====
    URL_PROBE_TIMEOUT_SECONDS: float = Field(5.0, gt=0, description="Per-request HEAD timeout")
    URL_PROBE_CONCURRENCY: int = Field(16, ge=1, le=64, description="Maximum probes in flight")
    URL_VERIFY_BUDGET_SECONDS: float = Field(20.0, gt=0, description="Wall clock cap for all probes")
    TREAT_403_AS_VALID: bool = True
    PROBE_USER_AGENT: str = DEFAULT_PROBE_USER_AGENT

    # ==== Page content extraction ====
    PAGE_FETCH_TIMEOUT_SECONDS: float = Field(15.0, gt=0)
    PAGE_BODY_MAX_CHARS: int = Field(8000, ge=200)

    # ==== API / observability ====
    API_RATE_LIMIT: str = "10/minute"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def accepted_block_statuses(self) -> FrozenSet[int]:
        """Non-2xx/3xx statuses the verifier treats as reachable."""
        return ACCEPTED_BLOCK_STATUSES if self.TREAT_403_AS_VALID else frozenset()


@lru_cache()
def get_settings() -> Settings:
    return Settings()
