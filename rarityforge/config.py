from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Build settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="RARITYFORGE_")

    app_name: str = "RarityForge"
    debug: bool = False

    # Input catalog (catalog JSON or upload cache)
    catalog_path: Path | None = None

    # Overrides the identifier found in the catalog
    collection_id: str | None = None

    # Artifacts are written to <output_dir>/<collection_id>.json
    output_dir: Path = Path("public/db")

    # Metadata fetch tuning
    concurrency: int = 24
    max_attempts: int = 3
    retry_base_delay: float = 0.2
    retry_factor: float = 2.0
    retry_jitter: float = 0.0
    request_timeout: float = 30.0

    # Global deadline (seconds) for the whole fetch pool. None disables it.
    fetch_deadline: float | None = None


settings = Settings()


# =============================================================================
# ARTIFACT CONSTANTS
# =============================================================================

# Bumped whenever the artifact layout changes
COLLECTION_DB_VERSION = 1

# Log fetch progress every N completed items
FETCH_PROGRESS_EVERY = 250
