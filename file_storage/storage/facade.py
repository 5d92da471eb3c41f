"""Storage facade.

``Storage`` hides the active driver from application code. It starts
unconfigured, is configured exactly once with a ``StorageConfig``, and then
delegates every data operation to the driver it built.

Usage:
    storage = Storage()
    storage.configure({"driver": "local", "connection": {"root_url": "/data"}})
    await storage.put("a/b.txt", b"hi")
    storage.public_url("a/b.txt")
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from typing import TypeVar

from ..exceptions import AlreadyConfiguredError
from ..exceptions import NotConfiguredError
from ..exceptions import StorageTimeoutError
from ..logger_config import log_storage_call
from ..models import StorageConfig
from .base import ObjectInfo
from .base import StorageDriver
from .factory import create_driver

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Storage:
    """Process-level access point for file storage.

    Construct one at startup, call :meth:`configure`, and share it with the
    components that need storage. A second ``configure`` raises
    :class:`AlreadyConfiguredError`; :meth:`reset` exists for tests only.
    """

    def __init__(self) -> None:
        self._driver: StorageDriver | None = None
        self._config: StorageConfig | None = None
        self._lock = threading.Lock()

    # === Lifecycle ===

    def configure(self, options: StorageConfig | Mapping[str, Any], **driver_kwargs: Any) -> StorageDriver:
        """Validate options, build the driver and install it.

        Args:
            options: ``StorageConfig`` or mapping with ``driver`` and ``connection``
            **driver_kwargs: Passed to the driver (e.g., a pre-built ``client``)

        Returns:
            The installed driver

        Raises:
            ConfigurationError: If the options are invalid
            AlreadyConfiguredError: If a driver is already installed
        """
        with self._lock:
            if self._driver is not None:
                raise AlreadyConfiguredError(self._driver.driver_type)
            config = StorageConfig.from_options(options)
            driver = create_driver(config, **driver_kwargs)
            self._config = config
            self._driver = driver

        logger.info("Storage configured with %s driver (%s)", driver.driver_type, driver.root_path)
        return driver

    def reset(self) -> None:
        """Return to the unconfigured state. For tests only."""
        with self._lock:
            self._driver = None
            self._config = None

    @property
    def is_configured(self) -> bool:
        return self._driver is not None

    @property
    def driver_type(self) -> str | None:
        return self._driver.driver_type if self._driver is not None else None

    @property
    def config(self) -> StorageConfig | None:
        return self._config

    def _require_driver(self, operation: str) -> StorageDriver:
        driver = self._driver
        if driver is None:
            raise NotConfiguredError(operation)
        return driver

    @staticmethod
    async def _bounded(operation: str, awaitable: Awaitable[T], timeout: float | None) -> T:
        """Await a driver call, raising StorageTimeoutError after ``timeout`` seconds.

        The timeout stops the caller from waiting, not the backend work.
        Blocking driver calls run in worker threads that cannot be
        interrupted, so a timed-out ``put`` may still complete afterwards.
        Writes stay atomic: the object is either the old or the new content.
        """
        if timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout)
        except asyncio.TimeoutError as e:
            raise StorageTimeoutError(operation, timeout) from e

    # === Core Operations ===

    @log_storage_call
    async def put(
        self,
        key: str,
        content: bytes | str,
        content_type: str | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        """Write content at key, replacing any existing object.

        On ``StorageTimeoutError`` the write may still land later; check with
        ``exists``/``stat`` before retrying if that matters.
        """
        driver = self._require_driver("put")
        await self._bounded("put", driver.put(key, content, content_type), timeout)

    @log_storage_call
    async def get(self, key: str, *, timeout: float | None = None) -> bytes:
        """Read a whole object; raises NotFoundError if absent."""
        driver = self._require_driver("get")
        return await self._bounded("get", driver.get(key), timeout)

    @log_storage_call
    async def delete(self, key: str, *, timeout: float | None = None) -> None:
        """Delete an object; absent keys are not an error."""
        driver = self._require_driver("delete")
        await self._bounded("delete", driver.delete(key), timeout)

    @log_storage_call
    async def exists(self, key: str, *, timeout: float | None = None) -> bool:
        driver = self._require_driver("exists")
        return await self._bounded("exists", driver.exists(key), timeout)

    @log_storage_call
    def public_url(self, key: str) -> str:
        """Externally reachable URL for key. No I/O."""
        return self._require_driver("public_url").public_url(key)

    # === Supplementary Operations ===

    @log_storage_call
    async def stat(self, key: str, *, timeout: float | None = None) -> ObjectInfo | None:
        driver = self._require_driver("stat")
        return await self._bounded("stat", driver.stat(key), timeout)

    @log_storage_call
    async def copy(self, source: str, destination: str, *, timeout: float | None = None) -> None:
        driver = self._require_driver("copy")
        await self._bounded("copy", driver.copy(source, destination), timeout)

    @log_storage_call
    async def move(self, source: str, destination: str, *, timeout: float | None = None) -> None:
        driver = self._require_driver("move")
        await self._bounded("move", driver.move(source, destination), timeout)

    @log_storage_call
    async def list_keys(self, prefix: str = "", *, timeout: float | None = None) -> list[str]:
        driver = self._require_driver("list_keys")
        return await self._bounded("list_keys", driver.list_keys(prefix), timeout)

    @log_storage_call
    async def put_file(
        self,
        key: str,
        path: str | Path,
        content_type: str | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        driver = self._require_driver("put_file")
        await self._bounded("put_file", driver.put_file(key, path, content_type), timeout)

    def __repr__(self) -> str:
        state = self._driver.driver_type if self._driver is not None else "unconfigured"
        return f"<Storage {state}>"


# Default instance for the application
_storage_instance = Storage()


def get_storage() -> Storage:
    """Get the process default Storage instance.

    The instance is created unconfigured; the application configures it once
    at startup (see ``file_storage.bootstrap.init_storage``).
    """
    return _storage_instance


def reset_storage() -> None:
    """Reset the default Storage instance (for testing)."""
    _storage_instance.reset()
