# core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, Optional

from sqs_extended_client.core.exceptions import ValidationError

"""
SQS hard limit for a single message (body + attributes)
"""
DEFAULT_MESSAGE_SIZE_THRESHOLD = 262144


class Settings(BaseSettings):
    """
    Centralized configuration, loaded from the environment or a .env file.
    """

    # ------------------------------------------------------------
    # Project / Runtime
    # ------------------------------------------------------------
    PROJECT_NAME: str = "sqs-extended-client"
    DEBUG: bool = False

    # ------------------------------------------------------------
    # AWS Core
    # ------------------------------------------------------------
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_SESSION_TOKEN: Optional[str] = None

    # ------------------------------------------------------------
    # Messaging (SQS) / Storage (S3)
    # ------------------------------------------------------------
    SQS_REGION: str = "us-east-1"
    S3_REGION: str = "us-east-1"

    # ------------------------------------------------------------
    # Large payload offloading
    # ------------------------------------------------------------
    SQS_EXTENDED_S3_BUCKET: Optional[str] = Field(
        default=None,
        description="Bucket that receives offloaded payloads; offloading is disabled when unset",
    )
    SQS_EXTENDED_ALWAYS_THROUGH_S3: bool = Field(
        default=False,
        description="Offload every message regardless of its size",
    )
    SQS_EXTENDED_MESSAGE_SIZE_THRESHOLD: int = Field(
        default=DEFAULT_MESSAGE_SIZE_THRESHOLD,
        ge=0,
        description="Messages larger than this many bytes (body + attributes) are offloaded",
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()


class ExtendedClientConfiguration(BaseModel):
    """
    Offloading settings for an ExtendedSqsClient.

    Instances are frozen; the with_* helpers return a new configuration.
    The S3 client is shared by reference between copies and is never
    closed by this package.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    large_payload_support_enabled: bool = False
    always_through_s3: bool = False
    message_size_threshold: int = DEFAULT_MESSAGE_SIZE_THRESHOLD
    s3_client: Optional[Any] = None
    s3_bucket_name: Optional[str] = None

    @model_validator(mode="after")
    def _check_s3_settings(self) -> "ExtendedClientConfiguration":
        if self.message_size_threshold < 0:
            raise ValidationError("message_size_threshold cannot be negative.")

        has_client = self.s3_client is not None
        has_bucket = bool(self.s3_bucket_name)
        if has_client != has_bucket:
            raise ValidationError("s3_client and s3_bucket_name must be set together.")
        if has_client and not self.large_payload_support_enabled:
            raise ValidationError("S3 settings given while large payload support is disabled.")
        if self.large_payload_support_enabled and not has_client:
            raise ValidationError("Large payload support requires an S3 client and a bucket name.")
        return self

    def _replace(self, **changes: Any) -> "ExtendedClientConfiguration":
        # model_copy(update=...) skips validation, so rebuild from the fields
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        return type(self)(**values)

    def copy(self) -> "ExtendedClientConfiguration":
        return self._replace()

    def with_large_payload_support_enabled(self, s3_client: Any, s3_bucket_name: str) -> "ExtendedClientConfiguration":
        if s3_client is None or not s3_bucket_name:
            raise ValidationError("S3 client and/or S3 bucket name cannot be null.")
        return self._replace(
            large_payload_support_enabled=True,
            s3_client=s3_client,
            s3_bucket_name=s3_bucket_name,
        )

    def with_large_payload_support_disabled(self) -> "ExtendedClientConfiguration":
        return self._replace(
            large_payload_support_enabled=False,
            s3_client=None,
            s3_bucket_name=None,
        )

    def with_always_through_s3(self, always_through_s3: bool) -> "ExtendedClientConfiguration":
        return self._replace(always_through_s3=always_through_s3)

    def with_message_size_threshold(self, message_size_threshold: int) -> "ExtendedClientConfiguration":
        return self._replace(message_size_threshold=message_size_threshold)

    @classmethod
    def from_settings(cls, app_settings: Settings, s3_client: Any = None) -> "ExtendedClientConfiguration":
        """
        Build a configuration from environment settings.

        Offloading is enabled only when SQS_EXTENDED_S3_BUCKET is set; the
        S3 client is created through the shared factory when not supplied.
        """
        config = cls(
            always_through_s3=app_settings.SQS_EXTENDED_ALWAYS_THROUGH_S3,
            message_size_threshold=app_settings.SQS_EXTENDED_MESSAGE_SIZE_THRESHOLD,
        )
        if not app_settings.SQS_EXTENDED_S3_BUCKET:
            return config

        if s3_client is None:
            from sqs_extended_client.core.aws_client import get_s3_client
            s3_client = get_s3_client()
        return config.with_large_payload_support_enabled(s3_client, app_settings.SQS_EXTENDED_S3_BUCKET)
