"""
Shared pytest fixtures for the ebs-bootstrap test suite

Provides:
- AWS mocking (EC2 via moto)
- Mock storage provider, metadata provider and command runner
- Test data factories for volumes and attachments
"""

import os
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from ebs_bootstrap.commands import CommandResult, CommandRunner
from ebs_bootstrap.providers.base import (
    AttachmentInfo,
    AttachmentState,
    MetadataProvider,
    StorageProvider,
    VolumeInfo,
)


# Test configuration
TEST_AWS_REGION = "us-east-1"
TEST_AZ = "us-east-1a"
TEST_INSTANCE_ID = "i-0123456789abcdef0"
TEST_VOLUME_ID = "vol-0123456789abcdef0"
TEST_DEVICE = "/dev/xvdf"
TEST_MOUNT_POINT = "/data"


@pytest.fixture(scope="session")
def aws_credentials():
    """Mock AWS credentials for moto"""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = TEST_AWS_REGION


@pytest.fixture
def ec2_mock(aws_credentials):
    """Mock EC2 client backed by moto"""
    with mock_aws():
        ec2 = boto3.client("ec2", region_name=TEST_AWS_REGION)
        yield ec2


@pytest.fixture
def clean_env(monkeypatch):
    """Strip ebs-bootstrap environment variables for config tests"""
    for key in [
        "AWS_REGION", "EBS_VOLUME_ID", "EBS_MOUNT_POINT", "EBS_BLOCK_DEVICE",
        "EBS_FILESYSTEM_TYPE", "EBS_USE_EBS", "EBS_MAX_ATTEMPTS", "EBS_NO_SUDO",
        "LOG_LEVEL", "CLOUD_PROVIDER",
    ]:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


# ============================================================================
# Test Data Factories
# ============================================================================

def make_volume(
    volume_id: str = TEST_VOLUME_ID,
    availability_zone: str = TEST_AZ,
    attachments: list | None = None,
    state: str = "available",
) -> VolumeInfo:
    return VolumeInfo(
        volume_id=volume_id,
        availability_zone=availability_zone,
        state=state,
        size_gb=100,
        volume_type="gp3",
        attachments=attachments or [],
    )


def make_attachment(
    instance_id: str = TEST_INSTANCE_ID,
    device: str = TEST_DEVICE,
    state: AttachmentState | str = AttachmentState.ATTACHED,
) -> AttachmentInfo:
    return AttachmentInfo(instance_id=instance_id, device=device, state=state)


def make_result(returncode: int = 0, stdout: str = "", stderr: str = "") -> CommandResult:
    return CommandResult(argv=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def volume_factory():
    return make_volume


@pytest.fixture
def attachment_factory():
    return make_attachment


@pytest.fixture
def result_factory():
    return make_result


# ============================================================================
# Mock Collaborators
# ============================================================================

@pytest.fixture
def mock_storage():
    """Mock StorageProvider; get_volume reports no attachments by default."""
    storage = MagicMock(spec=StorageProvider)
    storage.describe_volumes.return_value = []
    storage.get_volume.return_value = make_volume()
    storage.attach_volume.return_value = None
    return storage


@pytest.fixture
def mock_metadata():
    """Mock MetadataProvider for an instance in TEST_AZ."""
    metadata = MagicMock(spec=MetadataProvider)
    metadata.get_availability_zone.return_value = TEST_AZ
    metadata.get_instance_id.return_value = TEST_INSTANCE_ID
    return metadata


@pytest.fixture
def mock_runner():
    """Mock CommandRunner; every command succeeds by default."""
    runner = MagicMock(spec=CommandRunner)
    runner.run.return_value = make_result(0)
    return runner


@pytest.fixture
def mock_ec2_client():
    """Mock boto3 EC2 client."""
    client = MagicMock()
    client.describe_volumes.return_value = {"Volumes": []}
    client.attach_volume.return_value = {"State": "attaching"}
    return client
