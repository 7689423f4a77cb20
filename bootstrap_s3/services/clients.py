"""boto3 client factories and error translation for the S3/STS capabilities.

Clients are memoized and shared between callers; boto3 clients are safe for
concurrent use across threads.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError, ConnectTimeoutError, ReadTimeoutError

from bootstrap_s3.core.config import settings
from bootstrap_s3.core.exceptions import ExternalServiceError
from bootstrap_s3.core.logging import get_logger

logger = get_logger(__name__)

BUCKET_ALREADY_OWNED_BY_YOU = "BucketAlreadyOwnedByYou"


@lru_cache(maxsize=1)
def get_s3_client() -> BaseClient:
    """Get or create the cached S3 client configured from settings.

    Returns:
        Configured S3 client.
    """
    return boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
    )


@lru_cache(maxsize=1)
def get_sts_client() -> BaseClient:
    """Get or create the cached STS client used for caller identity lookups."""
    return boto3.client(
        "sts",
        endpoint_url=settings.sts_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
    )


def error_code(exc: BaseException) -> str | None:
    """Return the AWS error code of a ``ClientError``, if any."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


@contextmanager
def translate_errors(
    operation: str,
    error_cls: type[ExternalServiceError],
    error_code_name: str,
    **details: Any,
) -> Iterator[None]:
    """Wrap boto failures in ``error_cls`` prefixed with ``operation``.

    Connect/read timeouts propagate unchanged so callers see their own deadline.
    """
    try:
        yield
    except (ConnectTimeoutError, ReadTimeoutError):
        raise
    except (ClientError, BotoCoreError) as exc:
        logger.exception("aws.call_failed", operation=operation, failure=error_code_name, error=str(exc), **details)
        raise error_cls(
            message=f"{operation}: {exc}",
            error_code=error_code_name,
            details={"operation": operation, "aws_error_code": error_code(exc), **details},
        ) from exc
