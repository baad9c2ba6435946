"""Application configuration management."""
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BUCKET = "mirror"
DEFAULT_ENDPOINT = "localhost:9000"
DEFAULT_REGION = "us-east-1"
DEFAULT_CHUNK_SIZE = 64 * 1024

StatErrorPolicy = Literal["fall_through", "raise"]


class Settings(BaseSettings):
    """Resolved application settings used by FastAPI dependencies."""

    model_config = SettingsConfigDict(env_prefix="BUCKET_INDEX_", extra="ignore")

    host: str = Field("0.0.0.0", description="Application bind address")
    port: int = Field(80, description="Application bind port")
    log_level: str = Field("INFO", description="Root logging level")

    bucket: str = Field(DEFAULT_BUCKET, description="Bucket exposed by the server")
    endpoint: str = Field(DEFAULT_ENDPOINT, description="host:port or URL of the S3 endpoint")
    secure: bool = Field(False, description="Use HTTPS when the endpoint has no scheme")
    region: str = Field(DEFAULT_REGION, description="Region used for request signing")
    access_key: Optional[str] = Field(
        default=None,
        description="Access key; the default boto3 credential chain is used when unset",
    )
    secret_key: Optional[str] = Field(default=None, description="Secret key paired with access_key")

    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, gt=0, description="Bytes per streamed body chunk")
    stat_error_policy: StatErrorPolicy = Field(
        "fall_through",
        description=(
            "What a failed metadata lookup does: fall_through tries directory "
            "resolution, raise answers 502"
        ),
    )

    @property
    def endpoint_url(self) -> str:
        if "://" in self.endpoint:
            return self.endpoint
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.endpoint}"


class ConfigFile(BaseModel):
    """Optional JSON configuration file structure."""

    model_config = {"extra": "ignore"}

    host: Optional[str] = None
    port: Optional[int] = None
    log_level: Optional[str] = None
    bucket: Optional[str] = None
    endpoint: Optional[str] = None
    secure: Optional[bool] = None
    region: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    chunk_size: Optional[int] = None
    stat_error_policy: Optional[StatErrorPolicy] = None


def _load_config_from_json(config_path: Path) -> ConfigFile:
    """Load and parse configuration from a JSON file (blocking, use at startup)."""

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {config_path}: {e}") from e
    except OSError as e:
        raise RuntimeError(f"Error loading configuration from {config_path}: {e}") from e
    return ConfigFile(**config_data)


def load_settings(config_path: Path | None = None, **overrides: Any) -> Settings:
    """Build settings from environment, an optional JSON file and explicit overrides.

    Precedence, lowest first: environment variables, the JSON file, overrides.
    Overrides whose value is None are ignored.
    """

    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(_load_config_from_json(config_path).model_dump(exclude_none=True))
    values.update({key: value for key, value in overrides.items() if value is not None})
    return Settings(**values)


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return a cached Settings instance read from the environment."""

    return load_settings()
