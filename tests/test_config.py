"""Tests for sqs_extended_client.core.config."""

from unittest.mock import MagicMock, patch

import pytest

from sqs_extended_client.core.config import (
    DEFAULT_MESSAGE_SIZE_THRESHOLD,
    ExtendedClientConfiguration,
    Settings,
)
from sqs_extended_client.core.exceptions import ValidationError

S3_BUCKET_NAME = "test-bucket-name"


def test_copy_shares_s3_client_but_not_the_configuration():
    s3 = MagicMock()
    config = (
        ExtendedClientConfiguration()
        .with_large_payload_support_enabled(s3, S3_BUCKET_NAME)
        .with_always_through_s3(True)
        .with_message_size_threshold(500)
    )

    copied = config.copy()

    assert copied is not config
    assert copied.s3_client is s3
    assert copied.s3_bucket_name == S3_BUCKET_NAME
    assert copied.large_payload_support_enabled is True
    assert copied.always_through_s3 is True
    assert copied.message_size_threshold == 500


def test_large_payload_support_enabled():
    s3 = MagicMock()
    config = ExtendedClientConfiguration().with_large_payload_support_enabled(s3, S3_BUCKET_NAME)

    assert config.large_payload_support_enabled is True
    assert config.s3_client is s3
    assert config.s3_bucket_name == S3_BUCKET_NAME


def test_disable_large_payload_support_clears_s3_settings():
    s3 = MagicMock()
    config = (
        ExtendedClientConfiguration()
        .with_large_payload_support_enabled(s3, S3_BUCKET_NAME)
        .with_large_payload_support_disabled()
    )

    assert config.large_payload_support_enabled is False
    assert config.s3_client is None
    assert config.s3_bucket_name is None
    s3.put_object.assert_not_called()


def test_always_through_s3_toggles():
    config = ExtendedClientConfiguration().with_always_through_s3(True)
    assert config.always_through_s3 is True
    assert config.with_always_through_s3(False).always_through_s3 is False
    # the original is untouched
    assert config.always_through_s3 is True


def test_message_size_threshold_default_and_override():
    config = ExtendedClientConfiguration()
    assert config.message_size_threshold == DEFAULT_MESSAGE_SIZE_THRESHOLD == 262144
    assert config.with_message_size_threshold(1000).message_size_threshold == 1000


def test_negative_threshold_is_rejected():
    with pytest.raises(ValidationError):
        ExtendedClientConfiguration().with_message_size_threshold(-1)


@pytest.mark.parametrize("s3_client, bucket", [(None, S3_BUCKET_NAME), (MagicMock(), ""), (MagicMock(), None)])
def test_enabling_requires_client_and_bucket(s3_client, bucket):
    with pytest.raises(ValidationError):
        ExtendedClientConfiguration().with_large_payload_support_enabled(s3_client, bucket)


def test_s3_settings_without_enabled_flag_are_rejected():
    with pytest.raises(ValidationError):
        ExtendedClientConfiguration(s3_client=MagicMock(), s3_bucket_name=S3_BUCKET_NAME)


def test_configuration_is_frozen():
    config = ExtendedClientConfiguration()
    with pytest.raises(Exception):
        config.always_through_s3 = True


def test_from_settings_without_bucket_disables_offloading():
    app_settings = Settings(SQS_EXTENDED_S3_BUCKET=None, SQS_EXTENDED_MESSAGE_SIZE_THRESHOLD=1024)

    config = ExtendedClientConfiguration.from_settings(app_settings)

    assert config.large_payload_support_enabled is False
    assert config.message_size_threshold == 1024


def test_from_settings_with_bucket_uses_given_client():
    s3 = MagicMock()
    app_settings = Settings(SQS_EXTENDED_S3_BUCKET=S3_BUCKET_NAME, SQS_EXTENDED_ALWAYS_THROUGH_S3=True)

    config = ExtendedClientConfiguration.from_settings(app_settings, s3_client=s3)

    assert config.large_payload_support_enabled is True
    assert config.always_through_s3 is True
    assert config.s3_client is s3
    assert config.s3_bucket_name == S3_BUCKET_NAME


def test_from_settings_creates_s3_client_when_missing():
    s3 = MagicMock()
    app_settings = Settings(SQS_EXTENDED_S3_BUCKET=S3_BUCKET_NAME)

    with patch("sqs_extended_client.core.aws_client.get_s3_client", return_value=s3) as factory:
        config = ExtendedClientConfiguration.from_settings(app_settings)

    factory.assert_called_once_with()
    assert config.s3_client is s3
