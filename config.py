"""
Application settings

Loaded once from the process environment (and an optional .env file) and
passed explicitly to the record store and the image policy.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from errors import ConfigurationError

MAX_IMAGE_BYTES = 5 * 1024 * 1024


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = Field(..., alias="MONGODB_URI", min_length=1)
    mongodb_db: str = Field("school_management", alias="MONGODB_DB")
    mongodb_collection: str = Field("schools", alias="MONGODB_COLLECTION")

    # Images
    image_storage: Literal["file", "embedded"] = Field("file", alias="IMAGE_STORAGE")
    image_dir: str = Field("public/schoolImages", alias="IMAGE_DIR")
    image_url_prefix: str = Field("/schoolImages", alias="IMAGE_URL_PREFIX")
    max_image_bytes: int = Field(MAX_IMAGE_BYTES, alias="MAX_IMAGE_BYTES", gt=0)

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def load_settings(**overrides) -> Settings:
    """Build settings, turning a missing or bad variable into a ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise ConfigurationError(f"Invalid configuration: {fields}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


__all__ = ["Settings", "get_settings", "load_settings", "MAX_IMAGE_BYTES"]
