"""Find the configured volume in the instance's availability zone."""

import logging

from .exceptions import ConfigurationError, VolumeNotFoundError
from .providers.base import StorageProvider, VolumeInfo

logger = logging.getLogger(__name__)


def locate_volume(
    storage: StorageProvider,
    volume_id: str,
    availability_zone: str,
) -> VolumeInfo:
    """
    Look up a volume by id, restricted to one availability zone.

    Both values are passed to the provider as filters, so a returned volume
    always has the requested id and zone. The lookup runs once; provider
    errors propagate unchanged.

    Args:
        storage: Storage provider to query
        volume_id: Volume identifier (e.g. 'vol-0abc...')
        availability_zone: Zone of the running instance

    Returns:
        The first matching VolumeInfo

    Raises:
        ConfigurationError: If volume_id is empty
        VolumeNotFoundError: If the filtered query returned nothing
        ProviderError: If the provider call failed
    """
    if not volume_id:
        raise ConfigurationError("an EBS volume id is required")

    volumes = storage.describe_volumes(
        {
            "volume-id": volume_id,
            "availability-zone": availability_zone,
        }
    )
    if not volumes:
        raise VolumeNotFoundError(volume_id, availability_zone)

    logger.info(f"Found volume-id {volume_id}")
    return volumes[0]
