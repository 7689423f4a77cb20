"""Tests for per-machine bootstrap payload storage."""

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from bootstrap_s3.core.exceptions import (
    BucketManagementDisabledError,
    InvalidInputError,
    ObjectDeleteError,
    ObjectGetError,
    ObjectPutError,
)
from bootstrap_s3.models import Role
from bootstrap_s3.services.objects import ObjectStore, object_url


@pytest.fixture
def store(s3_double):
    return ObjectStore(s3_double, "demo-cluster1")


class TestObjectStorePut:
    """Tests for ObjectStore.put."""

    def test_put_returns_reference(self, store, s3_double):
        """Should upload under role/machine and return an s3:// URL."""
        reference = store.put(Role.NODE, "worker-0", b"payload")

        assert reference == "s3://demo-cluster1/node/worker-0"
        s3_double.put_object.assert_called_once_with(Bucket="demo-cluster1", Key="node/worker-0", Body=b"payload")

    def test_put_accepts_role_string(self, store, s3_double):
        assert store.put("control-plane", "cp-0", b"x") == "s3://demo-cluster1/control-plane/cp-0"

    def test_put_disabled_raises(self, s3_double):
        store = ObjectStore(s3_double, "demo-cluster1", enabled=False)

        with pytest.raises(BucketManagementDisabledError):
            store.put(Role.NODE, "worker-0", b"payload")

        assert s3_double.method_calls == []

    @pytest.mark.parametrize(
        ("role", "name", "payload", "code"),
        [
            ("", "worker-0", b"x", "empty_role"),
            (Role.NODE, "", b"x", "empty_machine_name"),
            (Role.NODE, "worker-0", b"", "empty_payload"),
        ],
    )
    def test_put_rejects_empty_arguments(self, store, s3_double, role, name, payload, code):
        with pytest.raises(InvalidInputError) as exc_info:
            store.put(role, name, payload)

        assert exc_info.value.error_code == code
        s3_double.put_object.assert_not_called()

    def test_put_failure_is_wrapped(self, store, s3_double):
        s3_double.put_object.side_effect = ClientError({"Error": {"Code": "AccessDenied"}}, "PutObject")

        with pytest.raises(ObjectPutError) as exc_info:
            store.put(Role.NODE, "worker-0", b"payload")

        assert exc_info.value.message.startswith("putting object: ")
        assert exc_info.value.details["key"] == "node/worker-0"


class TestObjectStoreGet:
    """Tests for ObjectStore.get."""

    def test_get_reads_body(self, store, s3_double):
        body = Mock()
        body.read.return_value = b"payload"
        s3_double.get_object.return_value = {"Body": body}

        assert store.get(Role.NODE, "worker-0") == b"payload"
        s3_double.get_object.assert_called_once_with(Bucket="demo-cluster1", Key="node/worker-0")

    def test_get_missing_key_is_wrapped(self, store, s3_double):
        s3_double.get_object.side_effect = ClientError({"Error": {"Code": "NoSuchKey"}}, "GetObject")

        with pytest.raises(ObjectGetError):
            store.get(Role.NODE, "worker-0")

    def test_get_disabled_raises(self, s3_double):
        with pytest.raises(BucketManagementDisabledError):
            ObjectStore(s3_double, "demo-cluster1", enabled=False).get(Role.NODE, "worker-0")


class TestObjectStoreDelete:
    """Tests for ObjectStore.delete."""

    def test_delete_issues_one_call(self, store, s3_double):
        store.delete(Role.CONTROL_PLANE, "cp-0")
        s3_double.delete_object.assert_called_once_with(Bucket="demo-cluster1", Key="control-plane/cp-0")

    def test_delete_disabled_is_noop(self, s3_double):
        ObjectStore(s3_double, "demo-cluster1", enabled=False).delete(Role.NODE, "worker-0")
        assert s3_double.method_calls == []

    def test_delete_failure_is_wrapped(self, store, s3_double):
        s3_double.delete_object.side_effect = ClientError({"Error": {"Code": "AccessDenied"}}, "DeleteObject")

        with pytest.raises(ObjectDeleteError):
            store.delete(Role.NODE, "worker-0")


def test_object_url():
    assert object_url("bucket", "a/b") == "s3://bucket/a/b"


@pytest.mark.integration
class TestObjectStoreWithMoto:
    """Object round trips against moto."""

    def test_put_get_delete(self, s3_with_bucket):
        store = ObjectStore(s3_with_bucket, "demo-cluster1")

        store.put(Role.NODE, "worker-0", b"#cloud-config\n")
        assert store.get(Role.NODE, "worker-0") == b"#cloud-config\n"

        store.delete(Role.NODE, "worker-0")
        with pytest.raises(ObjectGetError):
            store.get(Role.NODE, "worker-0")

    def test_delete_missing_key_succeeds(self, s3_with_bucket):
        """S3 reports success for a key that does not exist."""
        ObjectStore(s3_with_bucket, "demo-cluster1").delete(Role.NODE, "never-written")

    def test_put_to_missing_bucket_fails(self, mock_s3_client):
        with pytest.raises(ObjectPutError) as exc_info:
            ObjectStore(mock_s3_client, "missing-bucket").put(Role.NODE, "worker-0", b"x")

        assert exc_info.value.details["aws_error_code"] == "NoSuchBucket"
