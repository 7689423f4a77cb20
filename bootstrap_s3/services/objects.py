"""Per-machine bootstrap payloads stored in the cluster bucket.

Every operation issues exactly one S3 call. There is no caching and no retry
here; retry/backoff belongs to the boto3 client configuration.
"""

from __future__ import annotations

from botocore.client import BaseClient

from bootstrap_s3.core.exceptions import (
    BucketManagementDisabledError,
    InvalidInputError,
    ObjectDeleteError,
    ObjectGetError,
    ObjectPutError,
)
from bootstrap_s3.core.logging import get_logger
from bootstrap_s3.models import Role, role_name
from bootstrap_s3.services.clients import translate_errors

logger = get_logger(__name__)


def object_url(bucket: str, key: str) -> str:
    return f"s3://{bucket}/{key}"


class ObjectStore:
    """Puts, gets and deletes bootstrap payloads keyed by ``role/machine``."""

    def __init__(self, client: BaseClient, bucket: str, enabled: bool = True) -> None:
        """Initialize the store.

        Args:
            client: boto3 S3 client
            bucket: Bucket holding the payloads
            enabled: Whether bucket management is on for the cluster
        """
        self.client = client
        self.bucket = bucket
        self.enabled = enabled

    def put(self, role: Role | str, machine_name: str, payload: bytes) -> str:
        """Store ``payload`` for a machine and return its ``s3://`` reference.

        Raises:
            BucketManagementDisabledError: If bucket management is off
            InvalidInputError: If role, machine name or payload is empty
            ObjectPutError: If the upload fails
        """
        if not self.enabled:
            raise BucketManagementDisabledError(
                message="requested object creation but bucket management is not enabled",
                error_code="bucket_management_disabled",
                details={"bucket": self.bucket},
            )
        key = self._machine_key(role, machine_name)
        return self.put_key(key, payload)

    def get(self, role: Role | str, machine_name: str) -> bytes:
        if not self.enabled:
            raise BucketManagementDisabledError(
                message="requested object retrieval but bucket management is not enabled",
                error_code="bucket_management_disabled",
                details={"bucket": self.bucket},
            )
        return self.get_key(self._machine_key(role, machine_name))

    def delete(self, role: Role | str, machine_name: str) -> None:
        """Remove a machine's payload.

        Cleanup is best effort: with bucket management off this does nothing,
        and a missing key is whatever S3 reports for it.
        """
        if not self.enabled:
            logger.debug("object.delete_skipped", bucket=self.bucket, reason="bucket_management_disabled")
            return
        self.delete_key(self._machine_key(role, machine_name))

    def put_key(self, key: str, payload: bytes) -> str:
        if not payload:
            raise InvalidInputError(
                message="got empty data",
                error_code="empty_payload",
                details={"bucket": self.bucket, "key": key},
            )

        logger.info("object.put_start", bucket=self.bucket, key=key, size_bytes=len(payload))
        with translate_errors("putting object", ObjectPutError, "object_put_failed", bucket=self.bucket, key=key):
            self.client.put_object(Bucket=self.bucket, Key=key, Body=payload)
        logger.info("object.put_complete", bucket=self.bucket, key=key)

        return object_url(self.bucket, key)

    def get_key(self, key: str) -> bytes:
        with translate_errors("getting object", ObjectGetError, "object_get_failed", bucket=self.bucket, key=key):
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            content = response["Body"].read()
        logger.debug("object.get_complete", bucket=self.bucket, key=key, size_bytes=len(content))
        return content

    def delete_key(self, key: str) -> None:
        logger.info("object.delete_start", bucket=self.bucket, key=key)
        with translate_errors("deleting object", ObjectDeleteError, "object_delete_failed", bucket=self.bucket, key=key):
            self.client.delete_object(Bucket=self.bucket, Key=key)
        logger.info("object.delete_complete", bucket=self.bucket, key=key)

    def _machine_key(self, role: Role | str, machine_name: str) -> str:
        name = role_name(role)
        if not name:
            raise InvalidInputError(message="machine role can't be empty", error_code="empty_role")
        if not machine_name:
            raise InvalidInputError(message="machine name can't be empty", error_code="empty_machine_name")
        return f"{name}/{machine_name}"
