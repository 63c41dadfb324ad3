"""Process-level settings for arti-objectstore.

These are read from ``ARTI_OBJECTSTORE_*`` environment variables and are
separate from the per-instance configuration map the plugin host passes
to ``ObjectStore.init``.
"""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    log_json: bool = True
    otel_enabled: bool = False
    otel_service_name: str = "arti-objectstore"
    staging_root: Path = Path("/tmp/backups")

    model_config = {
        "env_prefix": "ARTI_OBJECTSTORE_",
        "case_sensitive": False,
    }


settings = Settings()
