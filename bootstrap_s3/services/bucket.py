"""Lifecycle of the per-cluster bootstrap data bucket.

``reconcile_bucket`` is safe to call repeatedly: creation collapses onto
``BucketAlreadyOwnedByYou`` and the policy is re-attached every time. A bucket
of the same name created by a different cluster in the same account is not
detected; S3 reports it as owned by us.
"""

from __future__ import annotations

from botocore.client import BaseClient
from botocore.exceptions import ClientError

from bootstrap_s3.core.exceptions import (
    BucketCreationError,
    BucketDeletionError,
    BucketNameError,
    BucketPolicyError,
    IdentityLookupError,
    InvalidInputError,
)
from bootstrap_s3.core.logging import get_logger
from bootstrap_s3.models import BucketSpec, Role
from bootstrap_s3.services.clients import BUCKET_ALREADY_OWNED_BY_YOU, error_code, translate_errors
from bootstrap_s3.services.naming import derive_bucket_name
from bootstrap_s3.services.objects import ObjectStore
from bootstrap_s3.services.policy import bootstrap_bucket_policy

logger = get_logger(__name__)

DEFAULT_REGION = "us-east-1"


class BucketService:
    """Creates, secures and deletes the bucket that serves machine bootstrap data."""

    def __init__(
        self,
        spec: BucketSpec,
        namespace: str,
        cluster_name: str,
        s3_client: BaseClient,
        sts_client: BaseClient,
    ) -> None:
        self.spec = spec
        self.namespace = namespace
        self.cluster_name = cluster_name
        self.s3_client = s3_client
        self.sts_client = sts_client

    @property
    def management_enabled(self) -> bool:
        return self.spec.management_enabled

    @property
    def bucket_name(self) -> str:
        try:
            return derive_bucket_name(self.spec.name, self.namespace, self.cluster_name)
        except BucketNameError as exc:
            raise BucketNameError(
                message=f"generating bucket name: {exc.message}",
                error_code=exc.error_code,
                details={"namespace": self.namespace, "cluster_name": self.cluster_name},
            ) from exc

    def object_store(self) -> ObjectStore:
        """Return an object store bound to this cluster's bucket."""
        return ObjectStore(self.s3_client, self.bucket_name, enabled=self.management_enabled)

    def reconcile_bucket(self) -> None:
        """Ensure the bucket exists and carries the current read policy."""
        if not self.management_enabled:
            return

        self._check_identities()
        bucket_name = self.bucket_name

        self._create_bucket_if_not_exist(bucket_name)
        self._ensure_bucket_policy(bucket_name)

    def delete_bucket(self) -> None:
        """Delete the bucket. Objects still in it make S3 reject the call."""
        if not self.management_enabled:
            return

        bucket_name = self.bucket_name
        logger.info("bucket.delete_start", bucket_name=bucket_name)
        with translate_errors(
            "deleting S3 bucket", BucketDeletionError, "bucket_delete_failed", bucket_name=bucket_name
        ):
            self.s3_client.delete_bucket(Bucket=bucket_name)
        logger.info("bucket.deleted", bucket_name=bucket_name)

    def bucket_policy(self, account_id: str) -> str:
        """Render the policy document for ``account_id`` as JSON."""
        return bootstrap_bucket_policy(self.spec, self.bucket_name, account_id).to_json()

    def account_id(self) -> str:
        with translate_errors("getting account ID", IdentityLookupError, "identity_lookup_failed"):
            identity = self.sts_client.get_caller_identity()
        return identity["Account"]

    def _check_identities(self) -> None:
        if not self.spec.control_plane_identity:
            raise InvalidInputError(
                message="control plane identity can't be empty",
                error_code="empty_control_plane_identity",
            )
        if not self.spec.node_identities or not all(self.spec.node_identities):
            raise InvalidInputError(
                message="node identities can't be empty",
                error_code="empty_node_identities",
                details={"node_identities": list(self.spec.node_identities)},
            )
        if self.spec.control_plane_identity in self.spec.node_identities:
            raise InvalidInputError(
                message=(
                    f"identity {self.spec.control_plane_identity!r} can't read both "
                    f"{Role.CONTROL_PLANE.value}/ and {Role.NODE.value}/"
                ),
                error_code="identity_spans_roles",
                details={
                    "identity": self.spec.control_plane_identity,
                    "roles": [Role.CONTROL_PLANE.value, Role.NODE.value],
                },
            )

    def _create_bucket_if_not_exist(self, bucket_name: str) -> None:
        logger.info("bucket.create_start", bucket_name=bucket_name)
        with translate_errors(
            "creating S3 bucket", BucketCreationError, "bucket_create_failed", bucket_name=bucket_name
        ):
            try:
                self.s3_client.create_bucket(**self._create_bucket_args(bucket_name))
            except ClientError as exc:
                # TODO: a bucket shared with another cluster in this account also lands here
                if error_code(exc) != BUCKET_ALREADY_OWNED_BY_YOU:
                    raise
                logger.info("bucket.already_owned", bucket_name=bucket_name)
                return
        logger.info("bucket.created", bucket_name=bucket_name)

    def _create_bucket_args(self, bucket_name: str) -> dict:
        args: dict = {"Bucket": bucket_name}
        region = self.s3_client.meta.region_name
        # us-east-1 rejects an explicit location constraint
        if region and region != DEFAULT_REGION:
            args["CreateBucketConfiguration"] = {"LocationConstraint": region}
        return args

    def _ensure_bucket_policy(self, bucket_name: str) -> None:
        policy = self.bucket_policy(self.account_id())
        with translate_errors(
            "creating S3 bucket policy", BucketPolicyError, "bucket_policy_failed", bucket_name=bucket_name
        ):
            self.s3_client.put_bucket_policy(Bucket=bucket_name, Policy=policy)
        logger.info("bucket.policy_attached", bucket_name=bucket_name)
