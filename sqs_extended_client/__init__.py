"""
sqs_extended_client - SQS client with transparent S3 offloading of large payloads
"""

__version__ = "1.0.0"

from sqs_extended_client.core.config import (
    DEFAULT_MESSAGE_SIZE_THRESHOLD,
    ExtendedClientConfiguration,
    Settings,
)
from sqs_extended_client.core.exceptions import (
    BlobStoreError,
    ExtendedClientError,
    PointerParseError,
    ValidationError,
)
from sqs_extended_client.integrations.sqs_client import ExtendedSqsClient
from sqs_extended_client.schemas.sqs_models import MessageS3Pointer, RESERVED_ATTRIBUTE_NAME

__all__ = [
    "BlobStoreError",
    "DEFAULT_MESSAGE_SIZE_THRESHOLD",
    "ExtendedClientConfiguration",
    "ExtendedClientError",
    "ExtendedSqsClient",
    "MessageS3Pointer",
    "PointerParseError",
    "RESERVED_ATTRIBUTE_NAME",
    "Settings",
    "ValidationError",
    "__version__",
]
