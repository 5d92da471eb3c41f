"""Local Disk Storage Driver.

Implements the StorageDriver interface on a local directory tree. Writes go
to a temporary file in the destination directory and are renamed into place,
so readers never observe a partially written object.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import shutil
import tempfile
from collections.abc import Callable
from datetime import datetime
from datetime import timezone
from pathlib import Path
from typing import IO
from typing import Any

from ..exceptions import InvalidKeyError
from ..exceptions import NotFoundError
from ..exceptions import QuotaError
from ..exceptions import StorageError
from ..exceptions import StorageIOError
from .base import ObjectInfo
from .base import StorageDriver
from .base import as_bytes
from .base import guess_content_type
from .keys import join_url
from .keys import validate_key
from .keys import validate_prefix

logger = logging.getLogger(__name__)

# Path the application mounts the local tree under when no public URL is set
DEFAULT_PUBLIC_PREFIX = "/storage"

_TEMP_SUFFIX = ".tmp"
_QUOTA_ERRNOS = {errno.ENOSPC, errno.EDQUOT, errno.EFBIG}


def _translate_os_error(exc: OSError, key: str) -> StorageError:
    """Map an OSError to the storage error taxonomy."""
    if isinstance(exc, (FileNotFoundError, NotADirectoryError, IsADirectoryError)):
        return NotFoundError(key)
    if exc.errno in _QUOTA_ERRNOS:
        return QuotaError(
            f"Disk quota exceeded while writing {key}: {exc.strerror}",
            details={"key": key, "errno": exc.errno},
            user_message="Storage space is exhausted.",
        )
    if isinstance(exc, PermissionError):
        return StorageIOError(
            f"Permission denied for {key}: {exc.strerror}",
            error_code="PERMISSION_DENIED",
            details={"key": key, "errno": exc.errno},
        )
    return StorageIOError(
        f"Filesystem error for {key}: {exc}",
        details={"key": key, "errno": exc.errno},
    )


def _translate_write_error(exc: OSError, key: str) -> StorageError:
    """Like _translate_os_error, but a path clash while writing is an I/O error."""
    if isinstance(exc, (FileNotFoundError, NotADirectoryError, IsADirectoryError)):
        return StorageIOError(f"Cannot write {key}: {exc}", details={"key": key, "errno": exc.errno})
    return _translate_os_error(exc, key)


def _is_temp_file(name: str) -> bool:
    return name.startswith(".") and name.endswith(_TEMP_SUFFIX)


class LocalDiskDriver(StorageDriver):
    """Storage driver using the local filesystem.

    Args:
        root_dir: Root directory of the tree; created if missing.
        public_url: URL prefix the tree is served under.
                    Defaults to "/storage".
    """

    def __init__(self, root_dir: str | Path, public_url: str | None = None):
        self._root = Path(root_dir).expanduser().resolve()
        self._public_url = public_url or DEFAULT_PUBLIC_PREFIX

        # Ensure root directory exists
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise _translate_os_error(e, str(self._root)) from e
        logger.debug("Local storage rooted at %s", self._root)

    @property
    def driver_type(self) -> str:
        return "local"

    @property
    def root_path(self) -> str:
        return str(self._root)

    def _full_path(self, key: str) -> Path:
        """Convert a validated key to an absolute path inside the root."""
        validate_key(key)
        path = self._root / key
        # Symlinks inside the tree must not lead outside it
        if not path.resolve().is_relative_to(self._root):
            raise InvalidKeyError(key, "key resolves outside the storage root")
        return path

    async def _run(self, key: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except OSError as e:
            raise _translate_os_error(e, key) from e

    async def _run_write(self, key: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except OSError as e:
            raise _translate_write_error(e, key) from e

    @staticmethod
    def _write_atomic(target: Path, write: Callable[[IO[bytes]], None]) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=_TEMP_SUFFIX, dir=target.parent
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                write(fh)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    # === Core Operations ===

    async def put(
        self, key: str, content: bytes | str, content_type: str | None = None
    ) -> None:
        # content_type is implied by the extension on disk
        path = self._full_path(key)
        data = as_bytes(content)
        await self._run_write(key, self._write_atomic, path, lambda fh: fh.write(data))

    async def get(self, key: str) -> bytes:
        path = self._full_path(key)
        return await self._run(key, path.read_bytes)

    async def delete(self, key: str) -> None:
        path = self._full_path(key)

        def _unlink() -> None:
            try:
                path.unlink()
            except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
                # Absent objects are already deleted; directories are not objects
                pass

        await self._run(key, _unlink)

    async def exists(self, key: str) -> bool:
        path = self._full_path(key)
        return await self._run(key, path.is_file)

    def public_url(self, key: str) -> str:
        validate_key(key)
        return join_url(self._public_url, key)

    # === Metadata and Bulk Operations ===

    async def stat(self, key: str) -> ObjectInfo | None:
        path = self._full_path(key)

        def _stat() -> ObjectInfo | None:
            try:
                st = path.stat()
            except (FileNotFoundError, NotADirectoryError):
                return None
            if not path.is_file():
                return None
            return ObjectInfo(
                key=key,
                size=st.st_size,
                last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                content_type=guess_content_type(key),
            )

        return await self._run(key, _stat)

    async def copy(self, source: str, destination: str) -> None:
        src_path = self._full_path(source)
        dst_path = self._full_path(destination)

        def _copy() -> None:
            try:
                src = src_path.open("rb")
            except (FileNotFoundError, NotADirectoryError, IsADirectoryError) as e:
                raise NotFoundError(source) from e
            with src:
                self._write_atomic(dst_path, lambda fh: shutil.copyfileobj(src, fh))

        await self._run_write(destination, _copy)

    async def move(self, source: str, destination: str) -> None:
        src_path = self._full_path(source)
        dst_path = self._full_path(destination)

        def _move() -> None:
            if not src_path.is_file():
                raise NotFoundError(source)
            dst_path.parent.mkdir(parents=True, exist_ok=True)
            os.replace(src_path, dst_path)

        await self._run_write(destination, _move)

    async def list_keys(self, prefix: str = "") -> list[str]:
        validate_prefix(prefix)
        base = self._root / prefix.rpartition("/")[0] if "/" in prefix else self._root

        def _walk() -> list[str]:
            if not base.is_dir():
                return []
            keys = []
            for dirpath, _dirnames, filenames in os.walk(base):
                for name in filenames:
                    if _is_temp_file(name):
                        continue
                    key = Path(dirpath, name).relative_to(self._root).as_posix()
                    if key.startswith(prefix):
                        keys.append(key)
            return sorted(keys)

        return await self._run(prefix, _walk)


__all__ = ["LocalDiskDriver", "DEFAULT_PUBLIC_PREFIX"]
