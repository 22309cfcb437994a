# services/payload_offload.py

import base64
import uuid
from typing import Any, Dict, Mapping, Optional

from botocore.exceptions import BotoCoreError, ClientError

from sqs_extended_client.core.config import ExtendedClientConfiguration
from sqs_extended_client.core.exceptions import BlobStoreError, PointerParseError
from sqs_extended_client.core.logger import logger
from sqs_extended_client.schemas.sqs_models import MessageS3Pointer, RESERVED_ATTRIBUTE_NAME
from sqs_extended_client.utils.log_events import log_s3_event

MessageAttributes = Mapping[str, Mapping[str, Any]]


# ============================================================================
# SIZE ACCOUNTING
# ============================================================================

def get_string_size_in_bytes(value: str) -> int:
    return len(value.encode("utf-8"))


def _binary_as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    return str(value)


def get_message_attributes_size(attributes: Optional[MessageAttributes]) -> int:
    """
    Wire size of SQS message attributes.

    Counts each name plus its DataType, StringValue and BinaryValue (the
    latter as base64 text, the way it travels on the wire).
    """
    total = 0
    for name, value in (attributes or {}).items():
        total += get_string_size_in_bytes(name)

        data_type = value.get("DataType")
        if data_type is not None:
            total += get_string_size_in_bytes(data_type)

        string_value = value.get("StringValue")
        if string_value is not None:
            total += get_string_size_in_bytes(string_value)

        binary_value = value.get("BinaryValue")
        if binary_value is not None:
            total += get_string_size_in_bytes(_binary_as_text(binary_value))
    return total


def get_message_size(body: str, attributes: Optional[MessageAttributes] = None) -> int:
    return get_string_size_in_bytes(body) + get_message_attributes_size(attributes)


def is_large(config: ExtendedClientConfiguration, body: str, attributes: Optional[MessageAttributes] = None) -> bool:
    return get_message_size(body, attributes) > config.message_size_threshold


def should_offload(config: ExtendedClientConfiguration, body: str, attributes: Optional[MessageAttributes] = None) -> bool:
    """True when the message must travel through S3 under this configuration."""
    if not config.large_payload_support_enabled:
        return False
    return config.always_through_s3 or is_large(config, body, attributes)


# ============================================================================
# MARKER ATTRIBUTE
# ============================================================================

def with_marker_attribute(attributes: Optional[MessageAttributes], payload_size: int) -> Dict[str, Any]:
    """Return a new attribute map carrying the reserved size marker."""
    if attributes and RESERVED_ATTRIBUTE_NAME in attributes:
        logger.warning(
            f"Message attribute {RESERVED_ATTRIBUTE_NAME} is reserved for the extended client "
            "and will be overwritten"
        )
    updated = dict(attributes or {})
    updated[RESERVED_ATTRIBUTE_NAME] = {
        "DataType": "Number",
        "StringValue": str(payload_size),
    }
    return updated


def without_marker_attribute(attributes: Optional[MessageAttributes]) -> Dict[str, Any]:
    return {name: value for name, value in (attributes or {}).items() if name != RESERVED_ATTRIBUTE_NAME}


def has_marker_attribute(message: Mapping[str, Any]) -> bool:
    return RESERVED_ATTRIBUTE_NAME in (message.get("MessageAttributes") or {})


def read_pointer_from_body(body: Optional[str]) -> MessageS3Pointer:
    try:
        return MessageS3Pointer.from_json(body or "")
    except ValueError as e:
        error_message = "Failed to read the S3 object pointer from an SQS message. Message was not received."
        logger.error(f"{error_message} Error: {e}")
        raise PointerParseError(error_message) from e


# ============================================================================
# S3 PAYLOAD STORE
# ============================================================================

class S3PayloadStore:
    """
    Reads, writes and deletes offloaded payloads in the configured bucket.

    Every S3 failure is wrapped in BlobStoreError; nothing is retried here
    beyond what the botocore client itself does.
    """

    def __init__(self, config: ExtendedClientConfiguration):
        self.s3 = config.s3_client
        self.bucket = config.s3_bucket_name

    def store_text(self, text: str) -> MessageS3Pointer:
        """Write text under a fresh UUID key and return its pointer."""
        key = str(uuid.uuid4())
        payload = text.encode("utf-8")

        try:
            self.s3.put_object(Bucket=self.bucket, Key=key, Body=payload)
        except (ClientError, BotoCoreError) as e:
            error_message = "Failed to store the message content in an S3 object. SQS message was not sent."
            logger.error(f"{error_message} Error: {e}")
            raise BlobStoreError(error_message) from e

        log_s3_event("s3_object_created", self.bucket, key, size=len(payload))
        return MessageS3Pointer(bucket=self.bucket, key=key)

    def get_text(self, pointer: MessageS3Pointer) -> str:
        try:
            response = self.s3.get_object(Bucket=pointer.bucket, Key=pointer.key)
            payload = response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            error_message = "Failed to get the S3 object which contains the message payload. Message was not received."
            logger.error(f"{error_message} Error: {e}")
            raise BlobStoreError(error_message) from e

        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            error_message = "Failure when handling the message which was read from S3 object. Message was not received."
            logger.error(f"{error_message} Error: {e}")
            raise BlobStoreError(error_message) from e

        log_s3_event("s3_object_read", pointer.bucket, pointer.key, size=len(payload))
        return text

    def delete(self, pointer: MessageS3Pointer) -> None:
        try:
            self.s3.delete_object(Bucket=pointer.bucket, Key=pointer.key)
        except (ClientError, BotoCoreError) as e:
            error_message = "Failed to delete the S3 object which contains the SQS message payload. SQS message was deleted."
            logger.error(f"{error_message} Error: {e}")
            raise BlobStoreError(error_message) from e

        log_s3_event("s3_object_deleted", pointer.bucket, pointer.key)
