"""Driver-agnostic file storage for the application.

One facade (``Storage``) in front of a local disk, S3/MinIO or Google Cloud
Storage driver, selected once at process start.
"""

from .exceptions import AlreadyConfiguredError
from .exceptions import AuthError
from .exceptions import ConfigurationError
from .exceptions import InvalidKeyError
from .exceptions import NotConfiguredError
from .exceptions import NotFoundError
from .exceptions import QuotaError
from .exceptions import StorageError
from .exceptions import StorageIOError
from .exceptions import StorageTimeoutError
from .models import ConnectionOptions
from .models import DriverType
from .models import StorageConfig
from .storage import ObjectInfo
from .storage import Storage
from .storage import StorageDriver
from .storage import get_storage
from .storage import reset_storage

__version__ = "1.0.0"

__all__ = [
    "AlreadyConfiguredError",
    "AuthError",
    "ConfigurationError",
    "ConnectionOptions",
    "DriverType",
    "InvalidKeyError",
    "NotConfiguredError",
    "NotFoundError",
    "ObjectInfo",
    "QuotaError",
    "Storage",
    "StorageConfig",
    "StorageDriver",
    "StorageError",
    "StorageIOError",
    "StorageTimeoutError",
    "get_storage",
    "reset_storage",
]
