"""Storage Driver Factory.

Maps a validated ``StorageConfig`` to a driver instance. This is the only
place where a driver type is turned into a concrete class.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Any

from ..models import DriverType
from ..models import StorageConfig

if TYPE_CHECKING:
    from .base import StorageDriver


def create_driver(config: StorageConfig | Mapping[str, Any], **kwargs: Any) -> StorageDriver:
    """Create a storage driver instance.

    Args:
        config: Validated configuration, or a mapping to validate
        **kwargs: Driver-specific extras (e.g., ``client`` for object stores)

    Returns:
        Configured StorageDriver instance

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = StorageConfig.from_options(config)
    conn = config.connection

    if config.driver is DriverType.S3:
        from .s3 import S3Driver

        return S3Driver(
            bucket=conn.bucket,
            access_key_id=conn.access_key_id,
            secret_access_key=conn.secret_access_key,
            region=conn.region,
            endpoint=conn.endpoint,
            path_style=conn.path_style,
            public_url=conn.public_url,
            client=kwargs.get("client"),
        )
    elif config.driver is DriverType.GCS:
        from .gcs import GCSDriver

        return GCSDriver(
            bucket_name=conn.gcp_bucket,
            project_id=conn.gcp_project_id,
            key_file=conn.gcp_key_file,
            api_endpoint=conn.gcp_api_endpoint,
            public_url=conn.public_url,
            client=kwargs.get("client"),
        )
    else:
        from .local import LocalDiskDriver

        return LocalDiskDriver(root_dir=conn.root_url, public_url=conn.public_url)
