"""Runtime configuration — env-driven.

Reads ``BAGFORGE_*`` environment variables and an optional ``.env`` file.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BagforgeConfig(BaseSettings):
    """Settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export BAGFORGE_DEFAULT_ALGORITHM=sha512
        export BAGFORGE_LOG_LEVEL=DEBUG
        export BAGFORGE_HASH_CHUNK_SIZE=4194304
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BAGFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"

    # Checksums
    default_algorithm: str = "sha256"
    hash_chunk_size: int = Field(default=1024 * 1024, gt=0)

    # Assembly
    add_bagging_date: bool = True

    # Validation
    verify_oxum: bool = True
    verify_tag_manifest: bool = True


# Module-level singleton, import as `from bagforge.config import config`
config = BagforgeConfig()
