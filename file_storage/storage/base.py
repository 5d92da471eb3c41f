"""Abstract Base Class for Storage Drivers.

Defines the contract that every storage driver must implement.
"""

from __future__ import annotations

import asyncio
import mimetypes
from abc import ABC
from abc import abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..exceptions import StorageIOError
from .keys import validate_key

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class ObjectInfo:
    """Metadata about a stored object."""

    key: str
    size: int
    last_modified: datetime
    content_type: str = DEFAULT_CONTENT_TYPE


def guess_content_type(key: str) -> str:
    """Determine content type from the key's extension."""
    content_type, _ = mimetypes.guess_type(key, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def source_read_error(key: str, path: str | Path, exc: OSError) -> StorageIOError:
    """Error for a local upload source that cannot be read."""
    return StorageIOError(
        f"Cannot read upload source {path} for {key}: {exc.strerror or exc}",
        details={"key": key, "path": str(path), "errno": exc.errno},
    )


def as_bytes(content: bytes | bytearray | memoryview | str) -> bytes:
    """Normalize payloads; text is stored as UTF-8."""
    if isinstance(content, str):
        return content.encode("utf-8")
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    raise TypeError(f"content must be bytes or str, got {type(content).__name__}")


class StorageDriver(ABC):
    """Abstract base class for storage drivers.

    All drivers (local disk, S3, GCS) implement this interface. Data
    operations are coroutines; ``public_url`` is pure and synchronous.
    Keys are validated by every driver before any backend access.
    """

    @property
    @abstractmethod
    def driver_type(self) -> str:
        """Return the driver identifier (e.g., 'local', 's3')."""
        pass

    @property
    @abstractmethod
    def root_path(self) -> str:
        """Return the root directory or bucket URI for diagnostics."""
        pass

    # === Core Operations ===

    @abstractmethod
    async def put(
        self, key: str, content: bytes | str, content_type: str | None = None
    ) -> None:
        """Write content at key, replacing any existing object.

        Args:
            key: Object key (e.g., "avatars/42.png")
            content: Payload; ``str`` is encoded as UTF-8
            content_type: MIME type, guessed from the key when omitted

        Raises:
            InvalidKeyError: If the key is malformed
            QuotaError: If space or provider limits are exceeded
            AuthError: If credentials are rejected
            StorageIOError: If the backend is unavailable
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Read the whole object.

        Raises:
            NotFoundError: If the object does not exist
            StorageIOError: On backend failure
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete an object. Deleting an absent key is not an error."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether an object exists without downloading it.

        Raises:
            StorageIOError: Only on backend connectivity failure
        """
        pass

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Compose the externally reachable URL for key. Performs no I/O."""
        pass

    # === Metadata and Bulk Operations ===

    @abstractmethod
    async def stat(self, key: str) -> ObjectInfo | None:
        """Get metadata about an object.

        Returns:
            ObjectInfo if the object exists, None otherwise
        """
        pass

    @abstractmethod
    async def copy(self, source: str, destination: str) -> None:
        """Copy an object, overwriting the destination.

        Raises:
            NotFoundError: If the source does not exist
        """
        pass

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> list[str]:
        """List keys under a prefix, sorted."""
        pass

    async def move(self, source: str, destination: str) -> None:
        """Move/rename an object."""
        await self.copy(source, destination)
        await self.delete(source)

    async def put_file(
        self, key: str, path: str | Path, content_type: str | None = None
    ) -> None:
        """Upload a local file.

        Raises:
            StorageIOError: If the source file cannot be read
        """
        validate_key(key)
        try:
            data = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as e:
            raise source_read_error(key, path, e) from e
        await self.put(key, data, content_type or guess_content_type(str(path)))

    # === Sync Wrappers (for scripts) ===

    def get_sync(self, key: str) -> bytes:
        """Synchronous wrapper for get."""
        return asyncio.run(self.get(key))

    def put_sync(self, key: str, content: bytes | str, content_type: str | None = None) -> None:
        """Synchronous wrapper for put."""
        asyncio.run(self.put(key, content, content_type))

    def exists_sync(self, key: str) -> bool:
        """Synchronous wrapper for exists."""
        return asyncio.run(self.exists(key))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.root_path}>"
