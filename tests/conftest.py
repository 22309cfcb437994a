"""Shared fixtures: mocked boto3 clients and message bodies around the SQS size limit."""

import io
from unittest.mock import MagicMock

import pytest

from sqs_extended_client.core.config import ExtendedClientConfiguration
from sqs_extended_client.integrations.sqs_client import ExtendedSqsClient

S3_BUCKET_NAME = "test-bucket-name"
SQS_QUEUE_URL = "test-queue-url"
S3_KEY = "2ede0e0f-50cc-4464-800e-72d6497ec063"
SQS_RECEIPT_HANDLE = "AQEBzDYhwQBHp+NIlvgL6WFKHNtoVpeCCQjmLep47yPr5dM5TmD1GWbneikO57LJAnL1iZ8THzk1H4r8k4Xqrk=="
SQS_SIZE_LIMIT = 262144


@pytest.fixture
def default_message_size_threshold():
    return SQS_SIZE_LIMIT


@pytest.fixture
def small_message_body():
    return "small message body"


@pytest.fixture
def large_message_body(default_message_size_threshold):
    return "x" * (default_message_size_threshold + 1)


@pytest.fixture
def small_message_attribute(small_message_body):
    return {
        "Small_Message_Attribute": {
            "StringValue": small_message_body,
            "DataType": "String",
        }
    }


@pytest.fixture
def s3_objects():
    """Backing store for the fake S3 client: (bucket, key) -> bytes."""
    return {}


@pytest.fixture
def mock_s3(s3_objects):
    s3 = MagicMock(name="s3")

    def put_object(Bucket, Key, Body):
        s3_objects[(Bucket, Key)] = Body
        return {"ETag": '"etag"'}

    def get_object(Bucket, Key):
        return {"Body": io.BytesIO(s3_objects[(Bucket, Key)])}

    s3.put_object.side_effect = put_object
    s3.get_object.side_effect = get_object
    s3.delete_object.return_value = {}
    return s3


@pytest.fixture
def mock_sqs():
    sqs = MagicMock(name="sqs")
    sqs.send_message.return_value = {"MessageId": "msg-1"}
    sqs.receive_message.return_value = {"Messages": []}
    sqs.delete_message.return_value = {}
    sqs.delete_message_batch.return_value = {"Successful": [], "Failed": []}
    return sqs


@pytest.fixture
def extended_config(mock_s3):
    return ExtendedClientConfiguration().with_large_payload_support_enabled(mock_s3, S3_BUCKET_NAME)


@pytest.fixture
def extended_client(mock_sqs, extended_config):
    return ExtendedSqsClient(mock_sqs, extended_config)
