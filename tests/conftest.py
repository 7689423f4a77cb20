"""
Shared pytest configuration and fixtures for bootstrap_s3 tests.

This module provides reusable fixtures for:
- Bucket settings (enabled, disabled)
- AWS S3/STS mocking (moto)
- MagicMock boto3 doubles for call assertions
- Node models for ignition rendering
"""

from unittest.mock import MagicMock

import boto3
import pytest
import structlog
from moto import mock_aws

from bootstrap_s3.ignition.node import DropinSpec, FileSpec, NodeModel, ServiceUnitSpec
from bootstrap_s3.models import BucketSpec

MOTO_ACCOUNT_ID = "123456789012"

# ============================================================================
# Bucket Settings Fixtures
# ============================================================================


@pytest.fixture
def bucket_spec() -> BucketSpec:
    """Bucket management switched on with one control-plane and two node roles."""
    return BucketSpec(
        enabled=True,
        create=True,
        control_plane_identity="cp-role",
        node_identities=["n1-role", "n2-role"],
    )


@pytest.fixture
def disabled_bucket_spec() -> BucketSpec:
    """Bucket settings that leave the bucket unmanaged."""
    return BucketSpec(
        enabled=True,
        create=False,
        control_plane_identity="cp-role",
        node_identities=["n1-role"],
    )


# ============================================================================
# AWS Fixtures
# ============================================================================


@pytest.fixture
def override_aws_settings(monkeypatch):
    """Point boto3 at fake credentials so nothing reaches real AWS."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def aws(override_aws_settings):
    """Activate moto for the duration of a test."""
    with mock_aws():
        yield


@pytest.fixture
def mock_s3_client(aws):
    """Mocked S3 client using moto."""
    return boto3.client("s3", region_name="us-east-1")


@pytest.fixture
def mock_sts_client(aws):
    """Mocked STS client using moto."""
    return boto3.client("sts", region_name="us-east-1")


@pytest.fixture
def s3_with_bucket(mock_s3_client):
    """S3 client with the cluster bucket and user-data bucket already created."""
    mock_s3_client.create_bucket(Bucket="demo-cluster1")
    mock_s3_client.create_bucket(Bucket="ignition-userdata-bucket")
    return mock_s3_client


@pytest.fixture
def s3_double() -> MagicMock:
    """MagicMock standing in for a boto3 S3 client."""
    client = MagicMock()
    client.meta.region_name = "us-east-1"
    return client


@pytest.fixture
def sts_double() -> MagicMock:
    """MagicMock standing in for a boto3 STS client."""
    client = MagicMock()
    client.get_caller_identity.return_value = {
        "Account": MOTO_ACCOUNT_ID,
        "Arn": f"arn:aws:iam::{MOTO_ACCOUNT_ID}:user/controller",
        "UserId": "AIDAEXAMPLE",
    }
    return client


# ============================================================================
# Ignition Fixtures
# ============================================================================


@pytest.fixture
def single_file_node() -> NodeModel:
    """Node model with one file and no services."""
    return NodeModel(
        files=[FileSpec(path="/etc/foo", content="bar", permissions="0640")],
        version="v1.17.4",
    )


@pytest.fixture
def kubelet_node() -> NodeModel:
    """Node model with a config file and an enabled unit carrying a drop-in."""
    return NodeModel(
        files=[
            FileSpec(path="/etc/kubernetes/kubelet.env", content="KUBELET_ARGS=--v=2\n"),
            FileSpec(path="/opt/bin/.keep"),
        ],
        services=[
            ServiceUnitSpec(
                name="kubelet.service",
                content="[Unit]\nDescription=kubelet\n\n[Service]\nExecStart=/usr/bin/kubelet\n",
                enabled=True,
                dropins=[DropinSpec(name="10-env.conf", content="[Service]\nEnvironmentFile=/etc/kubernetes/kubelet.env\n")],
            )
        ],
        version="v1.16.8",
    )


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_structlog_cache():
    """Reset structlog's logger cache between tests."""
    yield
    structlog.reset_defaults()
