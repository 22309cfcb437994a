# core/exceptions.py
"""
Client-side errors raised by the extended SQS client.

Errors coming back from the SQS backend are not wrapped; they reach the
caller as the original botocore exceptions.
"""


class ExtendedClientError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(ExtendedClientError):
    """A required request field is missing/empty or the configuration is invalid."""


class PointerParseError(ExtendedClientError):
    """A message marked as offloaded does not carry a readable S3 pointer."""


class BlobStoreError(ExtendedClientError):
    """An S3 put/get/delete failed or returned an unusable payload."""
