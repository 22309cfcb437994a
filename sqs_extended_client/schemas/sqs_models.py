# sqs_extended_client/schemas/sqs_models.py
from pydantic import BaseModel, ConfigDict, Field

"""
Reserved message attribute carrying the original payload size; its presence
marks a message whose body is a MessageS3Pointer
"""
RESERVED_ATTRIBUTE_NAME = "SQSLargePayloadSize"


class MessageS3Pointer(BaseModel):
    """
    Reference to an offloaded payload, sent as the SQS message body.

    Wire format: {"s3BucketName": "...", "s3Key": "..."}. Unknown fields are
    ignored on read so newer writers stay readable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    bucket: str = Field(..., alias="s3BucketName", min_length=1)
    key: str = Field(..., alias="s3Key", min_length=1)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, body: str) -> "MessageS3Pointer":
        return cls.model_validate_json(body)
