"""S3-Compatible Object Store Driver.

Implements the StorageDriver interface on AWS S3 and S3-compatible services
such as MinIO. Path-style addressing ("MinIO mode") puts the bucket in the
URL path instead of the host name.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from datetime import timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError
from botocore.exceptions import NoCredentialsError
from botocore.exceptions import PartialCredentialsError

from ..exceptions import AuthError
from ..exceptions import NotFoundError
from ..exceptions import QuotaError
from ..exceptions import StorageError
from ..exceptions import StorageIOError
from .base import DEFAULT_CONTENT_TYPE
from .base import ObjectInfo
from .base import StorageDriver
from .base import as_bytes
from .base import guess_content_type
from .base import source_read_error
from .keys import join_url
from .keys import validate_key
from .keys import validate_prefix

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}
_AUTH_CODES = {
    "AccessDenied",
    "AllAccessDisabled",
    "ExpiredToken",
    "InvalidAccessKeyId",
    "InvalidToken",
    "SignatureDoesNotMatch",
    "TokenRefreshRequired",
    "401",
    "403",
}
_QUOTA_CODES = {
    "EntityTooLarge",
    "QuotaExceeded",
    "XMinioAdminBucketQuotaExceeded",
    "XMinioStorageFull",
    "507",
}


def translate_client_error(exc: ClientError, key: str) -> StorageError:
    """Map a botocore ClientError to the storage error taxonomy."""
    error = exc.response.get("Error", {})
    code = str(error.get("Code", ""))
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    details = {"key": key, "backend_code": code, "status": status}

    if code == "NoSuchBucket":
        return StorageIOError(f"Bucket does not exist: {exc}", error_code="NO_SUCH_BUCKET", details=details)
    if code in _NOT_FOUND_CODES or status == 404:
        return NotFoundError(key, details={"backend_code": code})
    if code in _AUTH_CODES or status in (401, 403):
        return AuthError(
            f"Object store rejected credentials for {key}: {code}",
            details=details,
            user_message="Access to file storage was denied.",
        )
    if code in _QUOTA_CODES or status == 507:
        return QuotaError(f"Object store limit exceeded for {key}: {code}", details=details)
    return StorageIOError(f"Object store request failed for {key}: {exc}", details=details)


def split_endpoint(endpoint: str) -> tuple[str, str]:
    """Split an endpoint into (scheme, host). Scheme defaults to https.

    ``"minio.local:9000"`` -> ``("https", "minio.local:9000")``
    """
    if "://" in endpoint:
        parsed = urlsplit(endpoint)
        return parsed.scheme, f"{parsed.netloc}{parsed.path}".rstrip("/")
    return "https", endpoint.rstrip("/")


def build_url_base(
    bucket: str,
    endpoint: str | None = None,
    region: str | None = None,
    path_style: bool = False,
) -> str:
    """Compose the public URL base for a bucket.

    Path-style gives ``https://{endpoint}/{bucket}``; virtual-hosted style
    gives ``https://{bucket}.{endpoint}``. Without an endpoint the AWS host
    for the region is used.
    """
    if endpoint:
        scheme, host = split_endpoint(endpoint)
    else:
        scheme, host = "https", f"s3.{region}.amazonaws.com" if region else "s3.amazonaws.com"

    if path_style:
        return f"{scheme}://{host}/{bucket}"
    return f"{scheme}://{bucket}.{host}"


class S3Driver(StorageDriver):
    """Storage driver for S3-compatible object stores.

    Args:
        bucket: Bucket name
        access_key_id: Access key; the default credential chain is used when omitted
        secret_access_key: Secret key matching access_key_id
        region: Region name (overrides provider default resolution)
        endpoint: Custom endpoint, "host[:port]" or a full URL
        path_style: Use path-style addressing (MinIO mode)
        public_url: Explicit public URL prefix (e.g., a CDN in front of the bucket)
        client: Pre-built boto3 S3 client
    """

    def __init__(
        self,
        bucket: str,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        region: str | None = None,
        endpoint: str | None = None,
        path_style: bool = False,
        public_url: str | None = None,
        client: Any = None,
    ):
        self._bucket = bucket
        self._region = region
        self._endpoint = endpoint
        self._path_style = path_style
        # Chosen once; public_url() never re-evaluates the addressing style
        self._url_base = public_url or build_url_base(bucket, endpoint, region, path_style)

        if client is None:
            session = boto3.session.Session(
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                region_name=region,
            )
            endpoint_url = None
            if endpoint:
                scheme, host = split_endpoint(endpoint)
                endpoint_url = f"{scheme}://{host}"
            client = session.client(
                "s3",
                endpoint_url=endpoint_url,
                config=Config(
                    signature_version="s3v4",
                    s3={"addressing_style": "path" if path_style else "virtual"},
                ),
            )
        self._client = client
        logger.debug(
            "S3 storage bucket=%s endpoint=%s path_style=%s", bucket, endpoint or "aws", path_style
        )

    @property
    def driver_type(self) -> str:
        return "s3"

    @property
    def root_path(self) -> str:
        return f"s3://{self._bucket}"

    @property
    def bucket(self) -> str:
        return self._bucket

    async def _call(self, key: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking client call in a worker thread and translate errors."""
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except ClientError as e:
            raise translate_client_error(e, key) from e
        except (NoCredentialsError, PartialCredentialsError) as e:
            raise AuthError(f"No usable object store credentials: {e}", details={"key": key}) from e
        except BotoCoreError as e:
            raise StorageIOError(f"Object store unavailable: {e}", details={"key": key}) from e

    # === Core Operations ===

    async def put(
        self, key: str, content: bytes | str, content_type: str | None = None
    ) -> None:
        validate_key(key)
        await self._call(
            key,
            self._client.put_object,
            Bucket=self._bucket,
            Key=key,
            Body=as_bytes(content),
            ContentType=content_type or guess_content_type(key),
        )

    async def get(self, key: str) -> bytes:
        validate_key(key)

        def _download() -> bytes:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()

        return await self._call(key, _download)

    async def delete(self, key: str) -> None:
        validate_key(key)
        try:
            await self._call(key, self._client.delete_object, Bucket=self._bucket, Key=key)
        except NotFoundError:
            # Already gone
            pass

    async def exists(self, key: str) -> bool:
        validate_key(key)
        try:
            await self._call(key, self._client.head_object, Bucket=self._bucket, Key=key)
        except NotFoundError:
            return False
        return True

    def public_url(self, key: str) -> str:
        validate_key(key)
        return join_url(self._url_base, key)

    # === Metadata and Bulk Operations ===

    async def stat(self, key: str) -> ObjectInfo | None:
        validate_key(key)
        try:
            head = await self._call(key, self._client.head_object, Bucket=self._bucket, Key=key)
        except NotFoundError:
            return None
        return ObjectInfo(
            key=key,
            size=head.get("ContentLength", 0),
            last_modified=head.get("LastModified") or datetime.now(tz=timezone.utc),
            content_type=head.get("ContentType") or DEFAULT_CONTENT_TYPE,
        )

    async def copy(self, source: str, destination: str) -> None:
        validate_key(source)
        validate_key(destination)
        await self._call(
            source,
            self._client.copy_object,
            Bucket=self._bucket,
            Key=destination,
            CopySource={"Bucket": self._bucket, "Key": source},
        )

    async def list_keys(self, prefix: str = "") -> list[str]:
        validate_prefix(prefix)

        def _list() -> list[str]:
            paginator = self._client.get_paginator("list_objects_v2")
            keys = []
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"])
            return sorted(keys)

        return await self._call(prefix, _list)

    async def put_file(
        self, key: str, path: str | Path, content_type: str | None = None
    ) -> None:
        """Upload a local file; large files use multipart upload."""
        validate_key(key)
        try:
            await self._call(
                key,
                self._client.upload_file,
                str(path),
                self._bucket,
                key,
                ExtraArgs={"ContentType": content_type or guess_content_type(key)},
            )
        except S3UploadFailedError as e:
            # boto3 wraps the service response; translate the original when present
            cause = e.__cause__ or e.__context__
            if isinstance(cause, ClientError):
                raise translate_client_error(cause, key) from e
            raise StorageIOError(f"Upload of {key} failed: {e}", details={"key": key}) from e
        except OSError as e:
            raise source_read_error(key, path, e) from e


__all__ = ["S3Driver", "build_url_base", "split_endpoint", "translate_client_error"]
