"""Google Cloud Storage Driver.

Implements the StorageDriver interface using Google Cloud Storage.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from datetime import timezone
from typing import Any

from ..exceptions import AuthError
from ..exceptions import ConfigurationError
from ..exceptions import NotFoundError
from ..exceptions import QuotaError
from ..exceptions import StorageError
from ..exceptions import StorageIOError
from .base import DEFAULT_CONTENT_TYPE
from .base import ObjectInfo
from .base import StorageDriver
from .base import as_bytes
from .base import guess_content_type
from .keys import join_url
from .keys import validate_key
from .keys import validate_prefix

logger = logging.getLogger(__name__)

GCS_PUBLIC_HOST = "https://storage.googleapis.com"

# HTTP statuses that mean a size or space limit was hit
_QUOTA_STATUSES = {413, 507}


def translate_google_error(exc: Exception, key: str) -> StorageError:
    """Map a google-cloud-storage failure to the storage error taxonomy.

    Handles ``google.api_core`` API errors, ``google.auth`` credential and
    transport errors, and connection errors raised by the ``requests``
    transport underneath the client.
    """
    import requests
    from google.api_core import exceptions as gexc
    from google.auth import exceptions as auth_exc

    if isinstance(exc, (auth_exc.TransportError, requests.exceptions.RequestException)):
        return StorageIOError(f"Cloud Storage unreachable for {key}: {exc}", details={"key": key})
    if isinstance(exc, auth_exc.GoogleAuthError):
        return AuthError(
            f"Google Cloud credentials rejected for {key}: {exc}",
            details={"key": key},
            user_message="Access to file storage was denied.",
        )

    status = getattr(exc, "code", None)
    details = {"key": key, "status": status}

    if isinstance(exc, gexc.NotFound):
        return NotFoundError(key)
    if isinstance(exc, (gexc.Unauthorized, gexc.Forbidden)):
        return AuthError(
            f"Cloud Storage rejected credentials for {key}: {exc}",
            details=details,
            user_message="Access to file storage was denied.",
        )
    if status in _QUOTA_STATUSES:
        return QuotaError(f"Cloud Storage limit exceeded for {key}: {exc}", details=details)
    return StorageIOError(f"Cloud Storage request failed for {key}: {exc}", details=details)


class GCSDriver(StorageDriver):
    """Storage driver using Google Cloud Storage.

    Args:
        bucket_name: GCS bucket name
        project_id: GCP project; inferred from credentials when omitted
        key_file: Service account JSON key; default credentials otherwise
        api_endpoint: Custom API endpoint (e.g., an emulator)
        public_url: Explicit public URL prefix
        client: Pre-built ``google.cloud.storage.Client``
    """

    def __init__(
        self,
        bucket_name: str,
        project_id: str | None = None,
        key_file: str | None = None,
        api_endpoint: str | None = None,
        public_url: str | None = None,
        client: Any = None,
    ):
        self._bucket_name = bucket_name
        host = api_endpoint.rstrip("/") if api_endpoint else GCS_PUBLIC_HOST
        self._url_base = public_url or f"{host}/{bucket_name}"

        if client is None:
            client = self._create_client(project_id, key_file, api_endpoint)
        self._client = client
        self._bucket = client.bucket(bucket_name)
        logger.debug("GCS storage bucket=%s endpoint=%s", bucket_name, api_endpoint or "default")

    @staticmethod
    def _create_client(project_id: str | None, key_file: str | None, api_endpoint: str | None) -> Any:
        # Lazy import to avoid the dependency when using other drivers
        try:
            from google.auth.exceptions import DefaultCredentialsError
            from google.cloud import storage
        except ImportError as e:
            raise ImportError(
                "google-cloud-storage package required for the GCS driver. "
                "Install with: pip install 'file-storage[gcs]'"
            ) from e

        client_options = {"api_endpoint": api_endpoint} if api_endpoint else None
        try:
            if key_file:
                try:
                    return storage.Client.from_service_account_json(
                        key_file, project=project_id, client_options=client_options
                    )
                except (OSError, ValueError) as e:
                    # Missing, unreadable or malformed service account key file
                    raise ConfigurationError(
                        f"Cannot load GCS key file {key_file}: {e}", field="gcp_key_file", driver="gcs"
                    ) from e
            return storage.Client(project=project_id, client_options=client_options)
        except DefaultCredentialsError as e:
            raise AuthError(f"No usable Google Cloud credentials: {e}") from e

    @property
    def driver_type(self) -> str:
        return "gcs"

    @property
    def root_path(self) -> str:
        return f"gs://{self._bucket_name}"

    async def _call(self, key: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        from google.api_core.exceptions import GoogleAPIError
        from google.auth.exceptions import GoogleAuthError
        from requests.exceptions import RequestException

        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except (GoogleAPIError, GoogleAuthError, RequestException) as e:
            raise translate_google_error(e, key) from e

    # === Core Operations ===

    async def put(
        self, key: str, content: bytes | str, content_type: str | None = None
    ) -> None:
        validate_key(key)
        blob = self._bucket.blob(key)
        await self._call(
            key,
            blob.upload_from_string,
            as_bytes(content),
            content_type=content_type or guess_content_type(key),
        )

    async def get(self, key: str) -> bytes:
        validate_key(key)
        blob = self._bucket.blob(key)
        return await self._call(key, blob.download_as_bytes)

    async def delete(self, key: str) -> None:
        validate_key(key)
        blob = self._bucket.blob(key)
        try:
            await self._call(key, blob.delete)
        except NotFoundError:
            pass

    async def exists(self, key: str) -> bool:
        validate_key(key)
        blob = self._bucket.blob(key)
        return await self._call(key, blob.exists)

    def public_url(self, key: str) -> str:
        validate_key(key)
        return join_url(self._url_base, key)

    # === Metadata and Bulk Operations ===

    async def stat(self, key: str) -> ObjectInfo | None:
        validate_key(key)
        blob = await self._call(key, self._bucket.get_blob, key)
        if blob is None:
            return None
        return ObjectInfo(
            key=key,
            size=blob.size or 0,
            last_modified=blob.updated or datetime.now(tz=timezone.utc),
            content_type=blob.content_type or DEFAULT_CONTENT_TYPE,
        )

    async def copy(self, source: str, destination: str) -> None:
        validate_key(source)
        validate_key(destination)
        src_blob = self._bucket.blob(source)
        await self._call(source, self._bucket.copy_blob, src_blob, self._bucket, destination)

    async def list_keys(self, prefix: str = "") -> list[str]:
        validate_prefix(prefix)

        def _list() -> list[str]:
            return sorted(blob.name for blob in self._client.list_blobs(self._bucket_name, prefix=prefix or None))

        return await self._call(prefix, _list)


__all__ = ["GCSDriver", "translate_google_error"]
