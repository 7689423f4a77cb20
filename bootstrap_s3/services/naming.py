"""Deterministic S3 bucket names derived from cluster identity.

The derived name must be reproducible after a controller restart, so the
hash below is pinned: BLAKE2b with a digest as long as the requested output,
each digest byte mapped onto the base-36 alphabet. Changing any part of it
renames the bucket of every existing cluster whose ``namespace-cluster``
candidate is too long.
"""

from __future__ import annotations

import hashlib

from bootstrap_s3.core.exceptions import BucketNameError

S3_MAX_BUCKET_NAME_LENGTH = 63
HASHED_NAME_SUFFIX = "-k8s"
BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def base36_truncated_hash(value: str, length: int) -> str:
    """Hash ``value`` into exactly ``length`` lowercase base-36 characters.

    Raises:
        BucketNameError: If the length is outside BLAKE2b's digest range or the
            value cannot be encoded.
    """
    try:
        hasher = hashlib.blake2b(digest_size=length)
        hasher.update(value.encode("utf-8"))
    except (ValueError, UnicodeEncodeError) as exc:
        raise BucketNameError(
            message=f"unable to hash {value!r}: {exc}",
            error_code="bucket_name_hash_failed",
            details={"length": length},
        ) from exc
    return "".join(BASE36_ALPHABET[byte % 36] for byte in hasher.digest())


def derive_bucket_name(explicit_name: str | None, namespace: str, cluster_name: str) -> str:
    """Return the bucket name for a cluster.

    An explicit name wins. Otherwise ``<namespace>-<cluster>`` is used while it
    fits, and a fixed-width hash ending in ``-k8s`` once it does not.
    """
    if explicit_name:
        return explicit_name

    candidate = f"{namespace}-{cluster_name}"
    if len(candidate) < S3_MAX_BUCKET_NAME_LENGTH:
        return candidate

    short_name = base36_truncated_hash(candidate, S3_MAX_BUCKET_NAME_LENGTH - len(HASHED_NAME_SUFFIX))
    return f"{short_name}{HASHED_NAME_SUFFIX}"
