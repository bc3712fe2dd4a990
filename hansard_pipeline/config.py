"""
Configuration management for the Hansard pipeline.

Groups settings for the upstream Hansard API, the ingestion pipeline, the
speaker reconciliation pass and the member registry database.

Responsibility: Centralized configuration and environment management
"""

from functools import lru_cache
from typing import Annotated, Optional, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class HansardAPIConfig(BaseSettings):
    """Upstream Hansard API configuration"""

    base_url: str = Field(default="https://hansard-api.parliament.uk")
    timeout_seconds: float = Field(default=30.0)

    # 429/400 responses are retried this many extra times
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0.0)

    user_agent: str = Field(default="HansardPipeline/1.0")

    model_config = SettingsConfigDict(
        env_prefix="HANSARD_",
        case_sensitive=False,
        extra="ignore"
    )


class PipelineConfig(BaseSettings):
    """Ingestion pipeline configuration"""

    section_batch_size: int = Field(default=5, ge=1)
    batch_delay_seconds: float = Field(default=1.0, ge=0.0)
    sitting_date_ttl_seconds: int = Field(default=1800)  # 30 minutes
    max_rewind_days: int = Field(default=5, ge=1)

    chambers: Annotated[List[str], NoDecode] = Field(default=["Commons", "Lords"])

    filter_procedural: bool = Field(default=True)
    # Also drop member-less and single short contribution records
    strict_procedural_filter: bool = Field(default=False)
    skip_existing: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("chambers", mode="before")
    @classmethod
    def parse_chambers(cls, v):
        """Accept a comma-separated chamber list from the environment"""
        if isinstance(v, str):
            return [chamber.strip() for chamber in v.split(",") if chamber.strip()]
        return v


class ReconcilerConfig(BaseSettings):
    """Speaker name reconciliation configuration"""

    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    lookup_delay_seconds: float = Field(default=1.0, ge=0.0)
    matches_file: str = Field(default="speaker_matches.json")

    model_config = SettingsConfigDict(
        env_prefix="RECONCILER_",
        case_sensitive=False,
        extra="ignore"
    )


class DatabaseConfig(BaseSettings):
    """Member registry database configuration"""

    # Connection settings - prioritize DATABASE_URL env var
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    driver: str = Field(default="sqlite+aiosqlite")
    host: Optional[str] = Field(default="localhost")
    port: Optional[int] = Field(default=5432)
    database: str = Field(default="hansard_pipeline")
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)

    # Connection pool settings (PostgreSQL only)
    pool_size: int = Field(default=5)
    max_overflow: int = Field(default=10)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=3600)

    echo: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True  # Allow alias matching
    )

    @property
    def is_sqlite(self) -> bool:
        return self.connection_string.startswith("sqlite")

    @property
    def connection_string(self) -> str:
        """
        Build database connection string.

        Returns:
            SQLAlchemy async connection string
        """
        if self.database_url:
            url = self.database_url
            # Ensure async driver for async connections
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif url.startswith("sqlite:///"):
                url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
            return url

        if self.driver.startswith("sqlite"):
            return f"{self.driver}:///{self.database}.db"

        auth = ""
        if self.username:
            auth = self.username
            if self.password:
                auth = f"{auth}:{self.password}"
            auth = f"{auth}@"

        host_port = self.host or "localhost"
        if self.port:
            host_port = f"{host_port}:{self.port}"

        return f"{self.driver}://{auth}{host_port}/{self.database}"


class AppConfig(BaseSettings):
    """Application configuration"""

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        extra="ignore"
    )


class Settings(BaseSettings):
    """
    Global settings container.

    Loads configuration from:
    1. Environment variables
    2. .env file
    3. Default values

    Example:
        settings = Settings(
            pipeline=PipelineConfig(section_batch_size=2),
            reconciler=ReconcilerConfig(matches_file="/tmp/matches.json"),
        )
    """

    app: AppConfig = Field(default_factory=AppConfig)
    hansard: HansardAPIConfig = Field(default_factory=HansardAPIConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    reconciler: ReconcilerConfig = Field(default_factory=ReconcilerConfig)
    db: DatabaseConfig = Field(default_factory=DatabaseConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance (loaded on first use)."""
    return Settings()
