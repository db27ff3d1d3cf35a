import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    APP_NAME: str = Field("deploy-dashboard", alias="APP_NAME")
    API_PREFIX: str = Field("/api", alias="API_PREFIX")
    LOG_LEVEL: str = Field("INFO", alias="LOG_LEVEL")
    ALLOWED_CORS_ORIGINS: str = Field("*", alias="ALLOWED_CORS_ORIGINS")

    # Upstash Redis REST credentials (Vercel KV exposes the same API under KV_*)
    UPSTASH_REDIS_REST_URL: Optional[str] = Field(
        None, validation_alias=AliasChoices("UPSTASH_REDIS_REST_URL", "KV_REST_API_URL")
    )
    UPSTASH_REDIS_REST_TOKEN: Optional[str] = Field(
        None, validation_alias=AliasChoices("UPSTASH_REDIS_REST_TOKEN", "KV_REST_API_TOKEN")
    )
    REDIS_TIMEOUT_SECONDS: float = Field(5.0, alias="REDIS_TIMEOUT_SECONDS")

    # Storage tiers
    DEPLOY_REMOTE_ONLY: bool = Field(False, alias="DEPLOY_REMOTE_ONLY")
    DEPLOY_FILE_STORE_ENABLED: bool = Field(True, alias="DEPLOY_FILE_STORE_ENABLED")
    DEPLOY_DATA_DIR: Optional[str] = Field(None, alias="DEPLOY_DATA_DIR")
    DEPLOY_MEMORY_FALLBACK: bool = Field(True, alias="DEPLOY_MEMORY_FALLBACK")

    # Bark push relay, e.g. https://api.day.app/<device-key>/
    BARK_BASE: Optional[str] = Field(None, alias="BARK_BASE")

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    @property
    def remote_configured(self) -> bool:
        """Whether both Upstash credentials are present."""
        return bool(self.UPSTASH_REDIS_REST_URL and self.UPSTASH_REDIS_REST_TOKEN)

    @property
    def data_dir(self) -> Path:
        """Directory holding the JSON file tier.

        Serverless hosts mount the working directory read-only, so only /tmp is writable there.
        """
        if self.DEPLOY_DATA_DIR:
            return Path(self.DEPLOY_DATA_DIR)
        base = Path("/tmp") if os.getenv("VERCEL") else Path.cwd()
        return base / ".data"

    @property
    def cors_origins_list(self) -> List[str]:
        if self.ALLOWED_CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_CORS_ORIGINS.split(",")]


@lru_cache
def get_settings() -> Settings:
    return Settings()
