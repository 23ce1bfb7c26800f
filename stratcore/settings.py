"""
Runtime Settings
Process-level settings loaded from the environment and ``.env``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from stratcore.risk.store import RiskStateStore

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class EngineSettings(BaseSettings):
    """Settings shared by every strategy instance in the process."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    state_dir: Optional[Path] = Field(default=None, alias="STRATCORE_STATE_DIR")

    def risk_store(self, name: str) -> Optional[RiskStateStore]:
        """Persistence for one instance's daily risk state, if a state dir is set."""
        if self.state_dir is None:
            return None
        return RiskStateStore(self.state_dir, name)


@lru_cache()
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()


def reload_settings() -> EngineSettings:
    """Force reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()


def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
