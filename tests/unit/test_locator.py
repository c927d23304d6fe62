"""
Unit tests for the volume locator.
"""
from unittest.mock import MagicMock

import pytest

from ebs_bootstrap.exceptions import ConfigurationError, VolumeNotFoundError
from ebs_bootstrap.locator import locate_volume
from ebs_bootstrap.providers.aws import AWSStorageProvider
from ebs_bootstrap.providers.base import ProviderError


class TestLocateVolume:
    """Tests for locate_volume with a mock provider."""

    def test_filters_by_volume_id_and_zone(self, mock_storage, volume_factory):
        """Both volume id and availability zone are passed as filters."""
        volume = volume_factory()
        mock_storage.describe_volumes.return_value = [volume]

        result = locate_volume(mock_storage, "vol-0123456789abcdef0", "us-east-1a")

        assert result is volume
        mock_storage.describe_volumes.assert_called_once_with(
            {"volume-id": "vol-0123456789abcdef0", "availability-zone": "us-east-1a"}
        )

    def test_returns_first_match(self, mock_storage, volume_factory):
        """When the provider returns several volumes the first one wins."""
        first = volume_factory(state="in-use")
        second = volume_factory(state="available")
        mock_storage.describe_volumes.return_value = [first, second]

        assert locate_volume(mock_storage, first.volume_id, first.availability_zone) is first

    def test_empty_result_is_not_found(self, mock_storage):
        """A successful but empty describe raises VolumeNotFoundError, not ProviderError."""
        mock_storage.describe_volumes.return_value = []

        with pytest.raises(VolumeNotFoundError) as exc_info:
            locate_volume(mock_storage, "vol-missing", "us-east-1a")

        assert not isinstance(exc_info.value, ProviderError)
        assert exc_info.value.volume_id == "vol-missing"
        assert "cannot find volume with volume-id: vol-missing" in str(exc_info.value)

    def test_provider_error_propagates_unchanged(self, mock_storage):
        """Provider errors are not wrapped or retried."""
        error = ProviderError("Rate exceeded", "aws", "DescribeVolumes", code="Throttling", retryable=True)
        mock_storage.describe_volumes.side_effect = error

        with pytest.raises(ProviderError) as exc_info:
            locate_volume(mock_storage, "vol-1", "us-east-1a")

        assert exc_info.value is error
        assert mock_storage.describe_volumes.call_count == 1

    def test_empty_volume_id_rejected(self):
        """No provider call is made without a volume id."""
        storage = MagicMock()

        with pytest.raises(ConfigurationError):
            locate_volume(storage, "", "us-east-1a")

        storage.describe_volumes.assert_not_called()


class TestLocateVolumeWithMoto:
    """Locator against moto-backed EC2."""

    def test_finds_volume_in_zone(self, ec2_mock):
        """A volume in the instance's zone is found."""
        vol = ec2_mock.create_volume(AvailabilityZone="us-east-1a", Size=10)
        provider = AWSStorageProvider(region="us-east-1")

        result = locate_volume(provider, vol["VolumeId"], "us-east-1a")

        assert result.volume_id == vol["VolumeId"]
        assert result.availability_zone == "us-east-1a"
        assert result.attachments == []

    def test_volume_in_other_zone_is_not_found(self, ec2_mock):
        """The zone filter excludes a volume living elsewhere."""
        vol = ec2_mock.create_volume(AvailabilityZone="us-east-1b", Size=10)
        provider = AWSStorageProvider(region="us-east-1")

        with pytest.raises(VolumeNotFoundError):
            locate_volume(provider, vol["VolumeId"], "us-east-1a")
