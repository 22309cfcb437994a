# services/receipt_handle.py
"""
Embedding of an S3 pointer inside an SQS receipt handle.

Consumers only ever see the receipt handle, so a message read from S3 carries
its pointer there until it is deleted. Layout:

    -..s3Pointer..-<len(bucket)>:<bucket><len(key)>:<key><inner receipt handle>

Lengths are decimal character counts, so the bucket and key are sliced out
rather than searched for and may contain any character.

Handles written by earlier releases used paired text markers:

    -..s3BucketName..-<bucket>-..s3BucketName..--..s3Key..-<key>-..s3Key..-<inner>

They are still accepted by parse_receipt_handle but never produced.
"""

from typing import NamedTuple, Optional, Tuple

from sqs_extended_client.core.exceptions import PointerParseError
from sqs_extended_client.schemas.sqs_models import MessageS3Pointer

S3_POINTER_MARKER = "-..s3Pointer..-"

# Legacy paired markers
S3_BUCKET_NAME_MARKER = "-..s3BucketName..-"
S3_KEY_MARKER = "-..s3Key..-"


class ParsedReceiptHandle(NamedTuple):
    pointer: MessageS3Pointer
    inner_receipt_handle: str


def _read_field(handle: str, pos: int) -> Tuple[str, int]:
    sep = handle.find(":", pos)
    length_text = handle[pos:sep] if sep != -1 else ""
    if not (length_text.isascii() and length_text.isdigit()):
        raise PointerParseError("Malformed length prefix in extended receipt handle.")

    start = sep + 1
    end = start + int(length_text)
    if end > len(handle):
        raise PointerParseError("Extended receipt handle is truncated.")
    return handle[start:end], end


def embed_s3_pointer_in_receipt_handle(receipt_handle: str, pointer: MessageS3Pointer) -> str:
    return (
        f"{S3_POINTER_MARKER}"
        f"{len(pointer.bucket)}:{pointer.bucket}"
        f"{len(pointer.key)}:{pointer.key}"
        f"{receipt_handle}"
    )


def _parse_legacy(receipt_handle: str) -> ParsedReceiptHandle:
    bucket_start = len(S3_BUCKET_NAME_MARKER)
    bucket_end = receipt_handle.find(S3_BUCKET_NAME_MARKER, bucket_start)
    if bucket_end == -1 or not receipt_handle.startswith(S3_KEY_MARKER, bucket_end + len(S3_BUCKET_NAME_MARKER)):
        raise PointerParseError("Malformed legacy extended receipt handle.")

    key_start = bucket_end + len(S3_BUCKET_NAME_MARKER) + len(S3_KEY_MARKER)
    key_end = receipt_handle.find(S3_KEY_MARKER, key_start)
    if key_end == -1:
        raise PointerParseError("Malformed legacy extended receipt handle.")

    bucket = receipt_handle[bucket_start:bucket_end]
    key = receipt_handle[key_start:key_end]
    if not bucket or not key:
        raise PointerParseError("Legacy extended receipt handle has an empty bucket or key.")

    pointer = MessageS3Pointer(bucket=bucket, key=key)
    return ParsedReceiptHandle(pointer, receipt_handle[key_end + len(S3_KEY_MARKER):])


def parse_receipt_handle(receipt_handle: str) -> Optional[ParsedReceiptHandle]:
    """
    Split an extended receipt handle into its pointer and the SQS handle.

    Returns:
        None when the handle carries no pointer (a plain SQS handle).

    Raises:
        PointerParseError: the handle starts with a pointer prefix but the
        embedded pointer cannot be read.
    """
    if receipt_handle.startswith(S3_POINTER_MARKER):
        bucket, pos = _read_field(receipt_handle, len(S3_POINTER_MARKER))
        key, pos = _read_field(receipt_handle, pos)
        if not bucket or not key:
            raise PointerParseError("Extended receipt handle has an empty bucket or key.")
        return ParsedReceiptHandle(MessageS3Pointer(bucket=bucket, key=key), receipt_handle[pos:])

    if receipt_handle.startswith(S3_BUCKET_NAME_MARKER):
        return _parse_legacy(receipt_handle)

    return None
