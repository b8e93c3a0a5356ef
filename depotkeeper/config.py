"""Depot configuration — env-driven via pydantic-settings.

Reads from a .env file and DEPOTKEEPER_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class DepotConfig(BaseSettings):
    """Depot configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export DEPOTKEEPER_DATABASE_PATH=/data/depot.db
        export DEPOTKEEPER_KEEP_VERSIONS=5
        export DEPOTKEEPER_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DEPOTKEEPER_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Storage
    database_path: Path = Path(".depotkeeper/depot.db")

    # Retention
    keep_versions: int = 3
    # Handler tags required on top of the built-in artifact types
    extra_artifact_types: list[str] = []

    # Housekeeping
    housekeeping_workers: int = 1
    claim_owner: str = "housekeeper"

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton — import as `from depotkeeper.config import config`
config = DepotConfig()
