"""Tests for UserDataService."""

import json

import pytest
from botocore.exceptions import ClientError

from bootstrap_s3.core.config import Settings
from bootstrap_s3.ignition.backends import ObjectStoreBackend, StaticTemplateBackend
from bootstrap_s3.ignition.factory import Factory
from bootstrap_s3.models import MachineRef, Role
from bootstrap_s3.service import UserDataService, build_factory

MACHINE = MachineRef(Role.NODE, "worker-0")


class TestBuildFactory:
    """Tests for build_factory."""

    def test_static_backend(self):
        factory = build_factory(Settings(ignition_backend="static"))
        assert type(factory.backend) is StaticTemplateBackend

    def test_s3_backend_uses_given_client(self, s3_double):
        factory = build_factory(Settings(ignition_backend="s3"), client=s3_double)

        assert isinstance(factory.backend, ObjectStoreBackend)
        assert factory.backend.store.client is s3_double

    def test_template_settings_are_applied(self):
        settings = Settings(
            ignition_backend="static",
            ignition_templates={"v1.20.0": "custom/1.20.ign"},
            ignition_default_version="v1.20.0",
        )

        assert build_factory(settings).backend.templates.resolve("v1.20.0") == ("custom/1.20.ign", True)


class TestUserDataServiceStatic:
    """Tests with the in-memory backend."""

    @pytest.fixture
    def service(self, single_file_node):
        factory = Factory(StaticTemplateBackend("node-userdata", "ignition-userdata-bucket"))
        return UserDataService(factory, single_file_node)

    def test_user_data(self, service):
        config = json.loads(service.user_data())
        assert config["storage"]["files"][0]["path"] == "/etc/foo"

    def test_create_returns_reference(self, service):
        reference = service.create(MACHINE, b"rendered")

        assert reference == f"s3://ignition-userdata-bucket/{service.factory.file_path()}"

    def test_delete_without_store_is_noop(self, service):
        service.create(MACHINE, b"rendered")
        service.delete(MACHINE)


@pytest.mark.integration
class TestUserDataServiceS3:
    """Tests with the S3 backend against moto."""

    @pytest.fixture
    def service(self, single_file_node, s3_with_bucket):
        settings = Settings(ignition_backend="s3", user_data_bucket="ignition-userdata-bucket")
        return UserDataService.from_settings(single_file_node, settings, client=s3_with_bucket)

    def test_create_stores_payload(self, service, s3_with_bucket):
        service.create(MACHINE, b"rendered")

        key = service.factory.file_path()
        body = s3_with_bucket.get_object(Bucket="ignition-userdata-bucket", Key=key)["Body"].read()
        assert body == b"rendered"

    def test_delete_removes_payload(self, service, s3_with_bucket):
        service.create(MACHINE, b"rendered")
        key = service.factory.file_path()

        service.delete(MACHINE)

        with pytest.raises(ClientError):
            s3_with_bucket.get_object(Bucket="ignition-userdata-bucket", Key=key)

    def test_delete_removes_only_that_machines_payload(self, service, s3_with_bucket):
        """Deleting one machine leaves another machine's payload in place."""
        other = MachineRef(Role.CONTROL_PLANE, "cp-0")
        service.create(MACHINE, b"worker data")
        worker_key = service.key_for(MACHINE)
        service.create(other, b"control-plane data")
        other_key = service.key_for(other)

        service.delete(MACHINE)

        with pytest.raises(ClientError):
            s3_with_bucket.get_object(Bucket="ignition-userdata-bucket", Key=worker_key)
        body = s3_with_bucket.get_object(Bucket="ignition-userdata-bucket", Key=other_key)["Body"].read()
        assert body == b"control-plane data"
        assert service.key_for(MACHINE) is None
        assert service.key_for(other) == other_key

    def test_delete_before_create_is_noop(self, service, s3_with_bucket):
        service.delete(MACHINE)
        assert s3_with_bucket.list_objects_v2(Bucket="ignition-userdata-bucket")["KeyCount"] == 0
