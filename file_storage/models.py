"""Configuration models for the storage facade.

``StorageConfig`` is the immutable value handed to ``Storage.configure``. It
names one driver and carries a connection block; only the fields relevant to
that driver are validated.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator
from pydantic import model_validator

from .exceptions import ConfigurationError


class DriverType(str, Enum):
    """Available storage drivers."""

    LOCAL = "local"
    S3 = "s3"
    GCS = "gcs"


class ConnectionOptions(BaseModel):
    """Connection block shared by all drivers.

    Accepts both snake_case names and the camelCase names used by the
    application's config layer (``rootUrl``, ``awsBucket``, ...).
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    # === Local ===
    root_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("root_url", "rootUrl"),
        description="Root directory of the local tree",
    )
    public_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("public_url", "publicUrl", "rootUrlPublic"),
        description="Externally reachable URL prefix",
    )

    # === S3 / MinIO ===
    bucket: str | None = Field(
        default=None, validation_alias=AliasChoices("bucket", "awsBucket")
    )
    access_key_id: str | None = Field(
        default=None, validation_alias=AliasChoices("access_key_id", "accessKeyId", "awsAccessKeyId")
    )
    secret_access_key: str | None = Field(
        default=None,
        repr=False,
        validation_alias=AliasChoices("secret_access_key", "secretAccessKey", "awsSecretAccessKey"),
    )
    region: str | None = Field(
        default=None, validation_alias=AliasChoices("region", "awsDefaultRegion")
    )
    endpoint: str | None = Field(
        default=None, validation_alias=AliasChoices("endpoint", "awsEndpoint")
    )
    minio: bool = Field(
        default=False,
        validation_alias=AliasChoices("minio", "path_style", "pathStyle", "use_path_style_endpoint"),
        description="Use path-style addressing (bucket in the URL path)",
    )

    # === Google Cloud Storage ===
    gcp_project_id: str | None = Field(
        default=None, validation_alias=AliasChoices("gcp_project_id", "gcpProjectId")
    )
    gcp_key_file: str | None = Field(
        default=None, validation_alias=AliasChoices("gcp_key_file", "gcpKeyFile")
    )
    gcp_api_endpoint: str | None = Field(
        default=None, validation_alias=AliasChoices("gcp_api_endpoint", "gcpApiEndpoint")
    )
    gcp_bucket: str | None = Field(
        default=None, validation_alias=AliasChoices("gcp_bucket", "gcpBucket")
    )

    @field_validator(
        "root_url",
        "public_url",
        "bucket",
        "access_key_id",
        "secret_access_key",
        "region",
        "endpoint",
        "gcp_project_id",
        "gcp_key_file",
        "gcp_api_endpoint",
        "gcp_bucket",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        # Unset environment variables often arrive as empty strings
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def path_style(self) -> bool:
        return self.minio


_REQUIRED_FIELDS: dict[DriverType, tuple[str, ...]] = {
    DriverType.LOCAL: ("root_url",),
    DriverType.S3: ("bucket",),
    DriverType.GCS: ("gcp_bucket",),
}


class StorageConfig(BaseModel):
    """Immutable storage configuration: one driver plus its connection block."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    driver: DriverType = Field(description="Driver to activate: 'local', 's3' or 'gcs'")
    connection: ConnectionOptions = Field(default_factory=ConnectionOptions)

    @model_validator(mode="after")
    def validate_driver_fields(self) -> StorageConfig:
        """Check that the fields required by the selected driver are present."""
        for field_name in _REQUIRED_FIELDS[self.driver]:
            if getattr(self.connection, field_name) is None:
                raise ConfigurationError(
                    f"'{field_name}' is required for the {self.driver.value} driver",
                    field=field_name,
                    driver=self.driver.value,
                )

        if self.driver is DriverType.S3:
            has_key = self.connection.access_key_id is not None
            has_secret = self.connection.secret_access_key is not None
            if has_key != has_secret:
                missing = "secret_access_key" if has_key else "access_key_id"
                raise ConfigurationError(
                    "access_key_id and secret_access_key must be provided together",
                    field=missing,
                    driver=self.driver.value,
                )
        return self

    @classmethod
    def from_options(cls, options: StorageConfig | Mapping[str, Any]) -> StorageConfig:
        """Build a config from a ``StorageConfig`` or a plain mapping.

        Raises:
            ConfigurationError: If the options are invalid
        """
        if isinstance(options, StorageConfig):
            return options
        if not isinstance(options, Mapping):
            raise ConfigurationError(
                f"Storage options must be a mapping or StorageConfig, got {type(options).__name__}"
            )
        try:
            return cls.model_validate(dict(options))
        except ValidationError as e:
            errors = e.errors()
            first = errors[0] if errors else {}
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise ConfigurationError(
                f"Invalid storage options: {first.get('msg', str(e))}",
                field=location or None,
                details={"errors": [err.get("msg") for err in errors]},
            ) from e


__all__ = ["DriverType", "ConnectionOptions", "StorageConfig"]
