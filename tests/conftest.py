"""The pytest configuration for file storage testing.

Provides configured facades for every driver. The S3 driver runs against an
in-memory client that answers like botocore, so no network is needed.
"""

import io
import os
import threading
from datetime import datetime
from datetime import timezone

import pytest
from botocore.exceptions import ClientError

from file_storage.config import reset_settings
from file_storage.storage import Storage
from file_storage.storage import reset_storage

_STORAGE_ENV_VARS = [
    "STORAGE_DRIVER",
    "STORAGE_ROOT_URL",
    "STORAGE_PUBLIC_URL",
    "AWS_BUCKET",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_DEFAULT_REGION",
    "AWS_ENDPOINT",
    "AWS_USE_PATH_STYLE_ENDPOINT",
    "GCP_PROJECT_ID",
    "GCP_KEY_FILE",
    "GCP_API_ENDPOINT",
    "GCP_BUCKET",
    "LOG_FILE",
]


def client_error(code: str, status: int, operation: str = "GetObject") -> ClientError:
    """Build a botocore ClientError the way the SDK raises it."""
    return ClientError(
        {"Error": {"Code": code, "Message": code}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


class _Paginator:
    def __init__(self, objects):
        self._objects = objects

    def paginate(self, Bucket, Prefix=""):
        keys = sorted(k for k in self._objects if k.startswith(Prefix))
        # Two pages to exercise pagination
        middle = len(keys) // 2
        for chunk in (keys[:middle], keys[middle:]):
            page = {"KeyCount": len(chunk)}
            if chunk:
                page["Contents"] = [{"Key": k, "Size": len(self._objects[k][0])} for k in chunk]
            yield page


class InMemoryS3Client:
    """Minimal stand-in for a boto3 S3 client."""

    def __init__(self, bucket="test-bucket"):
        self.bucket = bucket
        self.objects: dict[str, tuple[bytes, str, datetime]] = {}
        self._lock = threading.Lock()

    def _check_bucket(self, Bucket, operation):
        if Bucket != self.bucket:
            raise client_error("NoSuchBucket", 404, operation)

    def put_object(self, Bucket, Key, Body, ContentType="binary/octet-stream"):
        self._check_bucket(Bucket, "PutObject")
        with self._lock:
            self.objects[Key] = (bytes(Body), ContentType, datetime.now(tz=timezone.utc))
        return {"ETag": '"etag"'}

    def get_object(self, Bucket, Key):
        self._check_bucket(Bucket, "GetObject")
        if Key not in self.objects:
            raise client_error("NoSuchKey", 404, "GetObject")
        data, content_type, _ = self.objects[Key]
        return {"Body": io.BytesIO(data), "ContentType": content_type, "ContentLength": len(data)}

    def head_object(self, Bucket, Key):
        self._check_bucket(Bucket, "HeadObject")
        if Key not in self.objects:
            raise client_error("404", 404, "HeadObject")
        data, content_type, modified = self.objects[Key]
        return {"ContentLength": len(data), "ContentType": content_type, "LastModified": modified}

    def delete_object(self, Bucket, Key):
        self._check_bucket(Bucket, "DeleteObject")
        with self._lock:
            self.objects.pop(Key, None)
        return {}

    def copy_object(self, Bucket, Key, CopySource):
        self._check_bucket(Bucket, "CopyObject")
        source = CopySource["Key"]
        if source not in self.objects:
            raise client_error("NoSuchKey", 404, "CopyObject")
        data, content_type, _ = self.objects[source]
        self.objects[Key] = (data, content_type, datetime.now(tz=timezone.utc))
        return {}

    def upload_file(self, Filename, Bucket, Key, ExtraArgs=None):
        with open(Filename, "rb") as fh:
            content_type = (ExtraArgs or {}).get("ContentType", "binary/octet-stream")
            self.put_object(Bucket=Bucket, Key=Key, Body=fh.read(), ContentType=content_type)

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return _Paginator(self.objects)


@pytest.fixture(autouse=True)
def clean_storage_environment(monkeypatch):
    """Isolate every test from the host's storage environment and singletons."""
    for var in _STORAGE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    reset_storage()
    yield
    reset_settings()
    reset_storage()


@pytest.fixture
def s3_client():
    """Provide an in-memory S3 client."""
    return InMemoryS3Client(bucket="test-bucket")


@pytest.fixture
def local_storage(tmp_path):
    """Provide a facade configured with the local driver."""
    storage = Storage()
    storage.configure(
        {
            "driver": "local",
            "connection": {"root_url": str(tmp_path / "data"), "public_url": "https://cdn.example/files"},
        }
    )
    return storage


@pytest.fixture
def s3_storage(s3_client):
    """Provide a facade configured with the S3 driver on an in-memory client."""
    storage = Storage()
    storage.configure(
        {
            "driver": "s3",
            "connection": {"bucket": "test-bucket", "endpoint": "minio.local:9000", "minio": True},
        },
        client=s3_client,
    )
    return storage


@pytest.fixture(params=["local", "s3"])
def any_storage(request):
    """Provide a configured facade for each driver that runs offline."""
    if request.param == "local":
        return request.getfixturevalue("local_storage")
    return request.getfixturevalue("s3_storage")


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: tests that exercise the facade end to end")


@pytest.fixture
def env(monkeypatch):
    """Set environment variables for the duration of a test."""

    def _set(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, str(value))
        return os.environ

    return _set


@pytest.fixture
def make_client_error():
    """Factory for botocore ClientError instances."""
    return client_error
