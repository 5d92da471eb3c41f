"""Unit tests for the storage exception hierarchy."""

from __future__ import annotations

import pytest

from file_storage.exceptions import AlreadyConfiguredError
from file_storage.exceptions import AuthError
from file_storage.exceptions import ConfigurationError
from file_storage.exceptions import InvalidKeyError
from file_storage.exceptions import NotConfiguredError
from file_storage.exceptions import NotFoundError
from file_storage.exceptions import QuotaError
from file_storage.exceptions import StorageError
from file_storage.exceptions import StorageIOError
from file_storage.exceptions import StorageTimeoutError


class TestStorageError:
    """Tests for the base StorageError class."""

    def test_basic_initialization(self):
        error = StorageError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.error_code == "STORAGE_ERROR"
        assert error.details == {}
        assert error.user_message == "Something went wrong"

    def test_with_all_parameters(self):
        error = StorageError(
            message="Technical error",
            error_code="CUSTOM_ERROR",
            details={"key": "value"},
            user_message="User-friendly message",
        )

        assert error.error_code == "CUSTOM_ERROR"
        assert error.details == {"key": "value"}
        assert error.user_message == "User-friendly message"

    def test_to_dict_preserves_subclass_name(self):
        result = QuotaError("disk full").to_dict()

        assert result["error_type"] == "QuotaError"
        assert result["error_code"] == "QUOTA_EXCEEDED"
        assert result["message"] == "disk full"


class TestSpecificErrors:
    @pytest.mark.parametrize(
        "error,code",
        [
            (NotConfiguredError("put"), "NOT_CONFIGURED"),
            (AlreadyConfiguredError("local"), "ALREADY_CONFIGURED"),
            (InvalidKeyError("../x", "path traversal is not allowed"), "INVALID_KEY"),
            (NotFoundError("a.txt"), "NOT_FOUND"),
            (AuthError("denied"), "AUTH_ERROR"),
            (QuotaError("full"), "QUOTA_EXCEEDED"),
            (StorageIOError("down"), "STORAGE_IO_ERROR"),
            (StorageTimeoutError("get", 1.5), "STORAGE_TIMEOUT"),
            (ConfigurationError("bad"), "CONFIGURATION_ERROR"),
        ],
    )
    def test_error_codes_are_stable(self, error, code):
        assert isinstance(error, StorageError)
        assert error.error_code == code

    def test_not_found_details(self):
        error = NotFoundError("docs/a.txt", details={"backend_code": "NoSuchKey"})

        assert error.key == "docs/a.txt"
        assert error.details == {"key": "docs/a.txt", "backend_code": "NoSuchKey"}
        assert "does not exist" in error.user_message

    def test_not_configured_mentions_operation(self):
        error = NotConfiguredError("get")

        assert "Cannot get" in str(error)
        assert error.details["operation"] == "get"

    def test_timeout_is_io_error(self):
        error = StorageTimeoutError("put", 0.5)

        assert isinstance(error, StorageIOError)
        assert error.details == {"operation": "put", "timeout": 0.5}

    def test_configuration_error_fields(self):
        error = ConfigurationError("'bucket' is required", field="bucket", driver="s3")

        assert error.details == {"field": "bucket", "driver": "s3"}

    def test_invalid_key_with_non_string(self):
        error = InvalidKeyError(None, "key must be a string")

        assert error.details["key"] == "None"
