"""Storage Abstraction Layer.

Provides one facade over interchangeable drivers:
- local: Local filesystem rooted at a directory
- s3: AWS S3 and S3-compatible services (MinIO)
- gcs: Google Cloud Storage

Usage:
    from file_storage.storage import get_storage

    storage = get_storage()
    storage.configure({"driver": "local", "connection": {"root_url": "public/storage"}})
    await storage.put("avatars/42.png", data, "image/png")
    url = storage.public_url("avatars/42.png")
"""

from .base import ObjectInfo
from .base import StorageDriver
from .facade import Storage
from .facade import get_storage
from .facade import reset_storage
from .factory import create_driver
from .keys import validate_key

__all__ = [
    "ObjectInfo",
    "Storage",
    "StorageDriver",
    "create_driver",
    "get_storage",
    "reset_storage",
    "validate_key",
]
