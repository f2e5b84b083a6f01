"""Mini README: Centralised configuration for WealthTracker.

Structure:
    * WealthTrackerSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Values are read from ``WEALTHTRACKER_*`` environment variables or a local
    ``.env`` file. ``get_settings`` caches the validated model so the CLI, the
    web application and the ledger storage agree on one configuration.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class WealthTrackerSettings(BaseSettings):
    """Runtime configuration for the ledger tools and the sync service."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug logging and auto-reload.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the local ledger snapshot.",
    )
    ledger_filename: str = Field(
        "income_data.json",
        description="File name of the ledger snapshot inside the data directory.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the sync service to bind to.",
    )
    interface_port: int = Field(
        3000,
        description="Port the sync service listens on.",
        ge=1,
        le=65535,
    )
    sync_ttl_seconds: int = Field(
        3600,
        description="Lifetime of a sync code from the moment it is issued.",
        gt=0,
    )
    sync_sweep_interval_seconds: float = Field(
        300,
        description="Seconds between background purges of expired codes; 0 disables the sweep.",
        ge=0,
    )
    allowed_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the sync service from a browser.",
    )

    class Config:
        env_prefix = "WEALTHTRACKER_"
        env_file = ".env"
        case_sensitive = False

    @validator("data_directory", pre=True)
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def ledger_path(self) -> Path:
        """Full path of the ledger snapshot file."""

        return Path(self.data_directory) / self.ledger_filename


@lru_cache()
def get_settings() -> WealthTrackerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return WealthTrackerSettings()
