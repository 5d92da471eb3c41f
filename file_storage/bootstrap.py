"""Process startup for file storage.

Call :func:`init_storage` once while the application boots, before it starts
serving requests. It sets up logging and metrics and configures the storage
facade from the environment.
"""

from __future__ import annotations

from typing import Any

from .config import Settings
from .config import get_settings
from .logger_config import setup_logging
from .metrics_config import initialize_metrics
from .metrics_config import is_metrics_enabled
from .storage import Storage
from .storage import get_storage


def init_storage(settings: Settings | None = None, storage: Storage | None = None) -> Storage:
    """Configure a Storage facade from settings.

    Args:
        settings: Settings to use; loaded from the environment when omitted
        storage: Facade to configure; the process default when omitted

    Returns:
        The configured facade

    Raises:
        ConfigurationError: If the environment describes an invalid configuration
        AlreadyConfiguredError: If the facade was configured before
    """
    settings = settings or get_settings()
    storage = storage or get_storage()

    setup_logging(settings.log_level, settings.structured_logging, settings.log_file)
    initialize_metrics()

    storage.configure(settings.to_storage_config())
    return storage


def get_storage_info(storage: Storage | None = None) -> dict[str, Any]:
    """Get information about the storage configuration.

    Returns:
        Dict with driver info for debugging/monitoring
    """
    storage = storage or get_storage()
    info: dict[str, Any] = {
        "configured": storage.is_configured,
        "driver": storage.driver_type,
        "metrics_enabled": is_metrics_enabled(),
    }
    if storage.config is not None:
        conn = storage.config.connection
        info["public_url"] = conn.public_url
        if storage.driver_type == "local":
            info["root_url"] = conn.root_url
        elif storage.driver_type == "s3":
            info.update(bucket=conn.bucket, endpoint=conn.endpoint, region=conn.region, path_style=conn.path_style)
        elif storage.driver_type == "gcs":
            info.update(bucket=conn.gcp_bucket, project_id=conn.gcp_project_id)
    return info
