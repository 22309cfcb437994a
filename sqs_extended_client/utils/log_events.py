import json
from datetime import datetime, timezone
from typing import Optional

from sqs_extended_client.core.logger import logger


def log_s3_event(
    event: str,
    bucket: str,
    key: str,
    size: Optional[int] = None,
) -> None:
    """
    Structured log line for an S3 payload object being created, read or deleted.
    """
    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "bucket": bucket,
        "key": key,
    }
    if size is not None:
        log_data["size_bytes"] = size
    logger.info(json.dumps(log_data))
