"""Bootstrap bucket lifecycle and ignition user-data generation for cluster machines.

The bucket side (``services``) creates, secures and deletes the per-cluster
S3 bucket and stores per-machine payloads in it. The ignition side
(``ignition``) renders node files and systemd units into an Ignition config
on top of a versioned base template.
"""

from bootstrap_s3.models import BucketSpec, MachineRef, Role
from bootstrap_s3.services import BucketService, ObjectStore, derive_bucket_name

__version__ = "0.1.0"

__all__ = [
    "BucketService",
    "BucketSpec",
    "MachineRef",
    "ObjectStore",
    "Role",
    "derive_bucket_name",
]
