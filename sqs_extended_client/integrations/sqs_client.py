# sqs_extended_client/integrations/sqs_client.py
"""
SQS client that transparently moves large message payloads through S3.

send_message, receive_message, delete_message and delete_message_batch add
the offloading behaviour; every other operation is forwarded to the wrapped
boto3 SQS client untouched. Methods take and return the same keyword
arguments and response dicts as boto3.

Usage:
    config = ExtendedClientConfiguration().with_large_payload_support_enabled(s3, "my-bucket")
    client = ExtendedSqsClient(boto3.client("sqs"), config)
    client.send_message(QueueUrl=url, MessageBody=large_text)
    for message in client.receive_message(QueueUrl=url).get("Messages", []):
        ...
        client.delete_message(QueueUrl=url, ReceiptHandle=message["ReceiptHandle"])
"""

from typing import Any, Dict, List, Optional, Tuple

from sqs_extended_client.core.config import ExtendedClientConfiguration
from sqs_extended_client.core.exceptions import BlobStoreError, ValidationError
from sqs_extended_client.core.logger import logger
from sqs_extended_client.schemas.sqs_models import MessageS3Pointer, RESERVED_ATTRIBUTE_NAME
from sqs_extended_client.services.payload_offload import (
    S3PayloadStore,
    get_string_size_in_bytes,
    has_marker_attribute,
    read_pointer_from_body,
    should_offload,
    with_marker_attribute,
    without_marker_attribute,
)
from sqs_extended_client.services.receipt_handle import (
    embed_s3_pointer_in_receipt_handle,
    parse_receipt_handle,
)

# Attribute name selectors that already make SQS return every message attribute
_ALL_ATTRIBUTES = {"All", ".*"}


def _require(value: Any, error_message: str) -> None:
    if value is None:
        logger.error(error_message)
        raise ValidationError(error_message)


class ExtendedSqsClient:
    """
    Decorates a boto3 SQS client with S3-backed large payload support.

    The configuration is copied at construction. Neither client is owned:
    close() closes the SQS client only, the S3 client stays with the caller.
    """

    def __init__(self, sqs_client: Any, config: Optional[ExtendedClientConfiguration] = None):
        _require(sqs_client, "sqs_client cannot be null.")
        self.sqs = sqs_client
        self.config = (config or ExtendedClientConfiguration()).copy()
        self._payload_store = S3PayloadStore(self.config) if self.config.large_payload_support_enabled else None

        logger.info(
            f"ExtendedSqsClient initialized: large_payload_support_enabled={self.config.large_payload_support_enabled} "
            f"always_through_s3={self.config.always_through_s3} "
            f"message_size_threshold={self.config.message_size_threshold} "
            f"s3_bucket_name={self.config.s3_bucket_name}"
        )

    @classmethod
    def default_client(cls, s3_bucket_name: str) -> "ExtendedSqsClient":
        """Client with default boto3 SQS/S3 clients and offloading to s3_bucket_name."""
        from sqs_extended_client.core.aws_client import get_s3_client, get_sqs_client, validate_aws_credentials

        validate_aws_credentials()
        config = ExtendedClientConfiguration().with_large_payload_support_enabled(get_s3_client(), s3_bucket_name)
        return cls(get_sqs_client(), config)

    @property
    def service_name(self) -> str:
        return self.sqs.meta.service_model.service_name

    def close(self) -> None:
        self.sqs.close()

    # ------------------------------------------------------------------------
    # OFFLOADING OPERATIONS
    # ------------------------------------------------------------------------

    def send_message(self, **request: Any) -> Dict[str, Any]:
        """
        Send a message, storing the body in S3 first when it is too large
        (or always, with always_through_s3).

        Raises:
            ValidationError: MessageBody missing or empty; nothing is sent.
            BlobStoreError: the S3 put failed; nothing is sent to SQS.
        """
        body = request.get("MessageBody")
        if not body:
            error_message = "messageBody cannot be null or empty."
            logger.error(error_message)
            raise ValidationError(error_message)

        attributes = request.get("MessageAttributes")
        if not should_offload(self.config, body, attributes):
            return self.sqs.send_message(**request)

        return self.sqs.send_message(**self._store_message_in_s3(request))

    def _store_message_in_s3(self, request: Dict[str, Any]) -> Dict[str, Any]:
        body = request["MessageBody"]
        attributes = with_marker_attribute(request.get("MessageAttributes"), get_string_size_in_bytes(body))
        pointer = self._payload_store.store_text(body)

        return {
            **request,
            "MessageBody": pointer.to_json(),
            "MessageAttributes": attributes,
        }

    def receive_message(self, **request: Any) -> Dict[str, Any]:
        """
        Receive messages, replacing every S3 pointer body with the stored
        payload and extending its receipt handle with the pointer.

        Raises:
            PointerParseError: a marked message has an unreadable pointer body.
            BlobStoreError: a payload could not be read from S3.
        """
        if not self.config.large_payload_support_enabled:
            return self.sqs.receive_message(**request)

        attribute_names = list(request.get("MessageAttributeNames") or [])
        if RESERVED_ATTRIBUTE_NAME not in attribute_names and not _ALL_ATTRIBUTES.intersection(attribute_names):
            attribute_names.append(RESERVED_ATTRIBUTE_NAME)

        response = self.sqs.receive_message(**{**request, "MessageAttributeNames": attribute_names})
        if "Messages" not in response:
            return response

        messages = [self._restore_message(message) for message in response["Messages"]]
        return {**response, "Messages": messages}

    def _restore_message(self, message: Dict[str, Any]) -> Dict[str, Any]:
        if not has_marker_attribute(message):
            return message

        pointer = read_pointer_from_body(message.get("Body"))
        text = self._payload_store.get_text(pointer)

        return {
            **message,
            "Body": text,
            "MessageAttributes": without_marker_attribute(message.get("MessageAttributes")),
            "ReceiptHandle": embed_s3_pointer_in_receipt_handle(message["ReceiptHandle"], pointer),
        }

    def delete_message(self, **request: Any) -> Dict[str, Any]:
        """
        Delete a message; if its receipt handle carries an S3 pointer the
        payload object is deleted from S3 after the SQS delete succeeds.

        Raises:
            ValidationError: ReceiptHandle missing.
            BlobStoreError: the S3 delete failed (the SQS message is already gone).
        """
        _require(request.get("ReceiptHandle"), "receiptHandle cannot be null.")

        if not self.config.large_payload_support_enabled:
            return self.sqs.delete_message(**request)

        parsed = parse_receipt_handle(request["ReceiptHandle"])
        if parsed is None:
            return self.sqs.delete_message(**request)

        response = self.sqs.delete_message(**{**request, "ReceiptHandle": parsed.inner_receipt_handle})
        self._payload_store.delete(parsed.pointer)
        return response

    def delete_message_batch(self, **request: Any) -> Dict[str, Any]:
        """
        Delete a batch of messages with a single SQS call, then delete the S3
        payload of every entry whose receipt handle carries a pointer and
        which SQS did not report under Failed.

        Each S3 delete is attempted once regardless of earlier failures; the
        first failure is raised after all of them ran.

        Raises:
            ValidationError: Entries missing, or an entry without ReceiptHandle.
            BlobStoreError: at least one S3 delete failed.
        """
        _require(request.get("Entries"), "deleteMessageBatchRequest entries cannot be null.")

        if not self.config.large_payload_support_enabled:
            return self.sqs.delete_message_batch(**request)

        entries: List[Dict[str, Any]] = []
        pointers: List[Tuple[str, MessageS3Pointer]] = []
        for entry in request["Entries"]:
            _require(entry.get("ReceiptHandle"), "receiptHandle cannot be null.")
            parsed = parse_receipt_handle(entry["ReceiptHandle"])
            if parsed is None:
                entries.append(entry)
                continue
            entries.append({**entry, "ReceiptHandle": parsed.inner_receipt_handle})
            pointers.append((entry.get("Id"), parsed.pointer))

        response = self.sqs.delete_message_batch(**{**request, "Entries": entries})

        # payloads of entries SQS could not delete are still referenced by the queue
        failed_ids = {failed.get("Id") for failed in response.get("Failed") or []}

        failures: List[BlobStoreError] = []
        for entry_id, pointer in pointers:
            if entry_id in failed_ids:
                logger.warning(f"SQS did not delete batch entry {entry_id}; keeping S3 object {pointer.key}")
                continue
            try:
                self._payload_store.delete(pointer)
            except BlobStoreError as e:
                failures.append(e)

        if failures:
            logger.error(f"{len(failures)} of {len(pointers)} S3 payload deletes failed for the batch")
            raise failures[0]
        return response

    # ------------------------------------------------------------------------
    # PASS-THROUGH OPERATIONS
    # ------------------------------------------------------------------------

    def add_permission(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.add_permission(**request)

    def change_message_visibility(self, **request: Any) -> Dict[str, Any]:
        """
        Forwarded unchanged. Pass the inner SQS handle, not the extended
        receipt handle of an offloaded message; SQS rejects the latter.
        """
        return self.sqs.change_message_visibility(**request)

    def change_message_visibility_batch(self, **request: Any) -> Dict[str, Any]:
        """Forwarded unchanged; entries need inner SQS handles, as for change_message_visibility."""
        return self.sqs.change_message_visibility_batch(**request)

    def create_queue(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.create_queue(**request)

    def delete_queue(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.delete_queue(**request)

    def get_queue_attributes(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.get_queue_attributes(**request)

    def get_queue_url(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.get_queue_url(**request)

    def list_dead_letter_source_queues(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.list_dead_letter_source_queues(**request)

    def list_queue_tags(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.list_queue_tags(**request)

    def list_queues(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.list_queues(**request)

    def purge_queue(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.purge_queue(**request)

    def remove_permission(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.remove_permission(**request)

    def send_message_batch(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.send_message_batch(**request)

    def set_queue_attributes(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.set_queue_attributes(**request)

    def tag_queue(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.tag_queue(**request)

    def untag_queue(self, **request: Any) -> Dict[str, Any]:
        return self.sqs.untag_queue(**request)
