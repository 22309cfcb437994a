# core/aws_client.py
"""
Centralized AWS client factory to ensure proper credential handling.
This module creates the SQS and S3 clients with explicit credential configuration.
"""
import boto3
from sqs_extended_client.core.config import settings
from sqs_extended_client.core.logger import logger
import os


def _credentials():
    # Settings (which loads from .env) first, then the environment; boto3's
    # default chain applies when both are unset
    return {
        "aws_access_key_id": settings.AWS_ACCESS_KEY_ID or os.getenv('AWS_ACCESS_KEY_ID'),
        "aws_secret_access_key": settings.AWS_SECRET_ACCESS_KEY or os.getenv('AWS_SECRET_ACCESS_KEY'),
        "aws_session_token": settings.AWS_SESSION_TOKEN or os.getenv('AWS_SESSION_TOKEN'),
    }


def get_s3_client():
    """Get S3 client with proper credentials."""
    try:
        client = boto3.client(
            "s3",
            region_name=settings.S3_REGION,
            **_credentials()
        )
        logger.info("S3 client initialized with credentials")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize S3 client: {str(e)}")
        raise


def get_sqs_client():
    """Get SQS client with proper credentials."""
    try:
        client = boto3.client(
            "sqs",
            region_name=settings.SQS_REGION,
            **_credentials()
        )
        logger.info("SQS client initialized with credentials")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize SQS client: {str(e)}")
        raise


def validate_aws_credentials():
    """Validate that AWS credentials are properly configured."""
    credentials = _credentials()

    if not credentials["aws_access_key_id"] or not credentials["aws_secret_access_key"]:
        logger.warning("Missing AWS credentials in both settings and environment variables")
        logger.info("AWS credentials not found. Falling back to the default boto3 credential chain "
                    "(shared config, instance profile, ...)")
        return False

    logger.info("AWS credentials found and validated")
    return True
