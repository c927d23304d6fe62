"""
Cloud Provider Factory

This module provides factory functions returning the storage and metadata
providers the bootstrap core runs against.

Usage:
    from ebs_bootstrap.providers import get_storage_provider, get_metadata_provider

    storage = get_storage_provider(region='eu-west-1')
    metadata = get_metadata_provider()

    zone = metadata.get_availability_zone()
    volumes = storage.describe_volumes({'volume-id': 'vol-123', 'availability-zone': zone})

Configuration:
    Set CLOUD_PROVIDER environment variable:
    - 'aws' (default): Amazon Web Services

    Provider-specific configuration via environment variables:
    - AWS: AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_PROFILE
"""

import logging
import os
from typing import Optional

from ..exceptions import ConfigurationError
from .base import (
    AttachmentInfo,
    AttachmentState,
    AuthenticationError,
    AuthorizationError,
    MetadataError,
    MetadataProvider,
    ProviderError,
    StorageProvider,
    VolumeInfo,
)

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("aws",)


def _provider_name(provider_name: Optional[str]) -> str:
    name = (provider_name or os.environ.get("CLOUD_PROVIDER", "aws")).lower()
    if name not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(
            f"Unknown cloud provider: {name}. "
            f"Valid options: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    return name


def get_storage_provider(
    region: str,
    provider_name: Optional[str] = None,
    **kwargs
) -> StorageProvider:
    """
    Get a storage provider for the given region.

    Args:
        region: Region the volume lives in
        provider_name: Override the provider (defaults to CLOUD_PROVIDER env var)
        **kwargs: Provider-specific options (e.g. session=boto3.Session())

    Returns:
        StorageProvider instance

    Raises:
        ConfigurationError: If provider name is not recognized
    """
    name = _provider_name(provider_name)
    logger.info(f"Initializing {name} storage provider in {region}")

    from .aws import AWSStorageProvider
    return AWSStorageProvider(region=region, session=kwargs.get("session"))


def get_metadata_provider(
    provider_name: Optional[str] = None,
    **kwargs
) -> MetadataProvider:
    """
    Get the metadata provider for the running instance.

    Args:
        provider_name: Override the provider (defaults to CLOUD_PROVIDER env var)
        **kwargs: Provider-specific options (base_url, timeout)

    Returns:
        MetadataProvider instance
    """
    _provider_name(provider_name)

    from .metadata import EC2MetadataProvider
    return EC2MetadataProvider(**kwargs)


__all__ = [
    # Factory functions
    "get_storage_provider",
    "get_metadata_provider",
    # Base classes
    "StorageProvider",
    "MetadataProvider",
    # Data classes
    "VolumeInfo",
    "AttachmentInfo",
    "AttachmentState",
    # Exceptions
    "ProviderError",
    "MetadataError",
    "AuthenticationError",
    "AuthorizationError",
]
