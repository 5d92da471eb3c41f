"""Centralized configuration for the file storage package.

Settings are read from environment variables (and a ``.env`` file) and turned
into a ``StorageConfig`` at process start.
"""

from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

from ..models import DriverType
from ..models import StorageConfig


class Settings(BaseSettings):
    """Centralized settings for file storage."""

    # === Driver Selection ===
    storage_driver: DriverType = Field(default=DriverType.LOCAL, description="Storage driver: 'local', 's3' or 'gcs'")

    # === Local Storage ===
    storage_root_url: str = Field(default="public/storage", description="Root directory for local storage")
    storage_public_url: str | None = Field(default=None, description="Public URL prefix for stored files")

    # === S3 / MinIO ===
    aws_bucket: str | None = Field(default=None, description="S3 bucket name")
    aws_access_key_id: str | None = Field(default=None, description="S3 access key")
    aws_secret_access_key: str | None = Field(default=None, repr=False, description="S3 secret key")
    aws_default_region: str | None = Field(default=None, description="S3 region")
    aws_endpoint: str | None = Field(default=None, description="Custom S3 endpoint (MinIO, etc.)")
    aws_use_path_style_endpoint: bool = Field(default=False, description="Path-style addressing (MinIO mode)")

    # === Google Cloud Storage ===
    gcp_project_id: str | None = Field(default=None, description="GCP project id")
    gcp_key_file: str | None = Field(default=None, description="Service account key file")
    gcp_api_endpoint: str | None = Field(default=None, description="GCS API endpoint override")
    gcp_bucket: str | None = Field(default=None, description="GCS bucket name")

    # === Logging Configuration ===
    log_level: str = Field(default="INFO", description="Logging level")
    structured_logging: bool = Field(default=False, description="Enable structured JSON logging")
    log_file: str | None = Field(default=None, description="Optional rotating log file")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    def to_storage_config(self) -> StorageConfig:
        """Build the StorageConfig for the selected driver.

        Raises:
            ConfigurationError: If a field required by the driver is missing
        """
        return StorageConfig.from_options(
            {
                "driver": self.storage_driver,
                "connection": {
                    "root_url": self.storage_root_url,
                    "public_url": self.storage_public_url,
                    "bucket": self.aws_bucket,
                    "access_key_id": self.aws_access_key_id,
                    "secret_access_key": self.aws_secret_access_key,
                    "region": self.aws_default_region,
                    "endpoint": self.aws_endpoint,
                    "minio": self.aws_use_path_style_endpoint,
                    "gcp_project_id": self.gcp_project_id,
                    "gcp_key_file": self.gcp_key_file,
                    "gcp_api_endpoint": self.gcp_api_endpoint,
                    "gcp_bucket": self.gcp_bucket,
                },
            }
        )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        load_dotenv()  # Load .env file
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (primarily for testing)."""
    global _settings
    _settings = None
