"""Unit tests for bucket name derivation."""

import pytest

from bootstrap_s3.core.exceptions import BucketNameError
from bootstrap_s3.services.naming import (
    BASE36_ALPHABET,
    HASHED_NAME_SUFFIX,
    S3_MAX_BUCKET_NAME_LENGTH,
    base36_truncated_hash,
    derive_bucket_name,
)


class TestDeriveBucketName:
    """Tests for derive_bucket_name."""

    def test_short_candidate_is_used_verbatim(self):
        """Should join namespace and cluster name with a hyphen."""
        assert derive_bucket_name(None, "demo", "cluster1") == "demo-cluster1"

    def test_explicit_name_wins(self):
        """Should return the explicit name without hashing."""
        assert derive_bucket_name("my-bucket", "demo", "x" * 100) == "my-bucket"

    def test_empty_explicit_name_falls_back_to_derivation(self):
        assert derive_bucket_name("", "demo", "cluster1") == "demo-cluster1"

    def test_candidate_just_under_limit_is_kept(self):
        """A 62 character candidate still fits."""
        namespace = "n" * 30
        cluster = "c" * 31
        assert derive_bucket_name(None, namespace, cluster) == f"{namespace}-{cluster}"

    def test_long_candidate_is_hashed(self):
        """A 63 character candidate is replaced by a hashed name."""
        name = derive_bucket_name(None, "n" * 30, "c" * 32)

        assert len(name) == S3_MAX_BUCKET_NAME_LENGTH
        assert name.endswith(HASHED_NAME_SUFFIX)
        assert all(char in BASE36_ALPHABET for char in name[: -len(HASHED_NAME_SUFFIX)])

    def test_hashed_name_is_deterministic(self):
        """Should produce the same name across calls."""
        first = derive_bucket_name(None, "production-namespace", "a-very-long-cluster-name-" * 3)
        second = derive_bucket_name(None, "production-namespace", "a-very-long-cluster-name-" * 3)
        assert first == second

    def test_different_clusters_get_different_names(self):
        first = derive_bucket_name(None, "production-namespace", "cluster-" * 8 + "a")
        second = derive_bucket_name(None, "production-namespace", "cluster-" * 8 + "b")
        assert first != second


class TestBase36TruncatedHash:
    """Tests for the pinned hash."""

    def test_length_matches_request(self):
        assert len(base36_truncated_hash("demo-cluster1", 20)) == 20

    def test_output_is_lowercase_base36(self):
        digest = base36_truncated_hash("demo-cluster1", 59)
        assert set(digest) <= set(BASE36_ALPHABET)

    def test_out_of_range_length_raises(self):
        """BLAKE2b digests are limited to 64 bytes."""
        with pytest.raises(BucketNameError) as exc_info:
            base36_truncated_hash("demo-cluster1", 65)

        assert exc_info.value.error_code == "bucket_name_hash_failed"
        assert isinstance(exc_info.value.__cause__, ValueError)
