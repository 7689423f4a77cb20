"""Bucket, object and naming services for bootstrap data."""

from .bucket import BucketService
from .clients import get_s3_client, get_sts_client
from .naming import derive_bucket_name
from .objects import ObjectStore

__all__ = ["BucketService", "ObjectStore", "derive_bucket_name", "get_s3_client", "get_sts_client"]
