"""Unit tests for StorageConfig validation."""

import pytest
from pydantic import ValidationError

from file_storage.exceptions import ConfigurationError
from file_storage.models import ConnectionOptions
from file_storage.models import DriverType
from file_storage.models import StorageConfig


class TestStorageConfig:
    def test_local_requires_root_url(self):
        with pytest.raises(ConfigurationError) as exc_info:
            StorageConfig.from_options({"driver": "local", "connection": {}})

        assert exc_info.value.details == {"field": "root_url", "driver": "local"}

    def test_s3_requires_bucket(self):
        with pytest.raises(ConfigurationError) as exc_info:
            StorageConfig.from_options({"driver": "s3", "connection": {"endpoint": "minio.local:9000"}})

        assert exc_info.value.details["field"] == "bucket"

    def test_gcs_requires_bucket(self):
        with pytest.raises(ConfigurationError):
            StorageConfig.from_options({"driver": "gcs", "connection": {"gcp_project_id": "p"}})

    def test_s3_credentials_must_come_in_pairs(self):
        with pytest.raises(ConfigurationError) as exc_info:
            StorageConfig.from_options(
                {"driver": "s3", "connection": {"bucket": "b", "access_key_id": "AKIA"}}
            )

        assert exc_info.value.details["field"] == "secret_access_key"

    def test_unknown_driver_is_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            StorageConfig.from_options({"driver": "ftp", "connection": {}})

        assert exc_info.value.details["field"] == "driver"

    def test_non_mapping_rejected(self):
        with pytest.raises(ConfigurationError):
            StorageConfig.from_options(["local"])

    def test_fields_of_inactive_driver_are_ignored(self):
        config = StorageConfig.from_options(
            {
                "driver": "local",
                "connection": {"root_url": "/data", "bucket": "unused", "access_key_id": "only-one"},
                "unexpected": True,
            }
        )

        assert config.driver is DriverType.LOCAL
        assert config.connection.bucket == "unused"

    def test_camel_case_aliases(self):
        config = StorageConfig.from_options(
            {
                "driver": "s3",
                "connection": {
                    "rootUrl": "public/storage",
                    "publicUrl": "https://cdn.example",
                    "awsBucket": "mybucket",
                    "awsAccessKeyId": "key",
                    "awsSecretAccessKey": "secret",
                    "awsDefaultRegion": "eu-west-1",
                    "awsEndpoint": "minio.local:9000",
                    "minio": True,
                    "gcpBucket": "unused",
                },
            }
        )
        conn = config.connection

        assert conn.root_url == "public/storage"
        assert conn.public_url == "https://cdn.example"
        assert conn.bucket == "mybucket"
        assert conn.access_key_id == "key"
        assert conn.secret_access_key == "secret"
        assert conn.region == "eu-west-1"
        assert conn.endpoint == "minio.local:9000"
        assert conn.path_style is True
        assert conn.gcp_bucket == "unused"

    def test_blank_strings_are_missing(self):
        with pytest.raises(ConfigurationError):
            StorageConfig.from_options({"driver": "s3", "connection": {"bucket": "  "}})

    def test_config_is_immutable(self):
        config = StorageConfig.from_options({"driver": "local", "connection": {"root_url": "/data"}})

        with pytest.raises(ValidationError):
            config.driver = DriverType.S3

    def test_existing_config_passes_through(self):
        config = StorageConfig(driver=DriverType.LOCAL, connection=ConnectionOptions(root_url="/data"))

        assert StorageConfig.from_options(config) is config

    def test_secret_hidden_from_repr(self):
        conn = ConnectionOptions(access_key_id="key", secret_access_key="s3cr3t")

        assert "s3cr3t" not in repr(conn)
