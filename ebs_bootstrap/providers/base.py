"""
Abstract base classes for cloud provider interfaces.

This module defines the interfaces the bootstrap core talks to. Keeping the
core behind these interfaces lets the attach/format/mount logic run against
fakes in tests and keeps boto3 and the metadata service at the edge.

Provider Categories:
- StorageProvider: Block storage inventory and attachment (EBS)
- MetadataProvider: Identity of the running instance (EC2 instance metadata)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class AttachmentState(str, Enum):
    """Provider-tracked lifecycle state of a volume attachment."""
    ATTACHING = "attaching"
    ATTACHED = "attached"
    DETACHING = "detaching"
    DETACHED = "detached"
    BUSY = "busy"

    @classmethod
    def parse(cls, value: str) -> "AttachmentState | str":
        """Map a provider string onto the enum, keeping unknown values as-is."""
        try:
            return cls(value)
        except ValueError:
            return value


@dataclass
class AttachmentInfo:
    """A volume bound to an instance at a device path."""
    instance_id: str
    device: str
    state: AttachmentState | str
    delete_on_termination: bool | None = None

    @property
    def is_attached(self) -> bool:
        return self.state == AttachmentState.ATTACHED


@dataclass
class VolumeInfo:
    """Standardized volume information across providers."""
    volume_id: str
    availability_zone: str
    state: str  # 'available', 'in-use', 'creating', 'deleting'
    size_gb: int | None = None
    volume_type: str | None = None
    attachments: list[AttachmentInfo] = field(default_factory=list)
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def attached_instance(self) -> str | None:
        """Instance named by the first attachment, if any."""
        if self.attachments:
            return self.attachments[0].instance_id
        return None


class StorageProvider(ABC):
    """
    Abstract interface for block storage operations.

    Implementations:
    - AWS: EBS volumes

    Example usage:
        provider = get_storage_provider(region='eu-west-1')
        volumes = provider.describe_volumes(
            {'volume-id': 'vol-123', 'availability-zone': 'eu-west-1a'}
        )
        provider.attach_volume('vol-123', 'i-12345', '/dev/xvdf')
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (aws)."""
        pass

    @abstractmethod
    def describe_volumes(self, filters: dict[str, str]) -> list[VolumeInfo]:
        """
        List volumes matching every filter.

        Args:
            filters: Provider filter names mapped to a single required value
                (e.g. {'volume-id': 'vol-123', 'availability-zone': 'us-east-1a'})

        Returns:
            Matching VolumeInfo objects, possibly empty

        Raises:
            ProviderError: If the inventory call fails
        """
        pass

    @abstractmethod
    def get_volume(self, volume_id: str) -> VolumeInfo | None:
        """
        Get fresh volume details by ID.

        Args:
            volume_id: Provider-specific volume identifier

        Returns:
            VolumeInfo if found, None otherwise

        Raises:
            ProviderError: If the inventory call fails
        """
        pass

    @abstractmethod
    def attach_volume(self, volume_id: str, instance_id: str, device: str) -> None:
        """
        Request attachment of a volume to a compute instance.

        The provider accepts the request asynchronously; callers observe
        completion by polling get_volume().

        Args:
            volume_id: Volume to attach
            instance_id: Target instance
            device: Device name/path

        Raises:
            ProviderError: If the provider rejects the request
        """
        pass


class MetadataProvider(ABC):
    """
    Abstract interface for the running instance's metadata.

    Implementations:
    - AWS: EC2 instance metadata service
    """

    @abstractmethod
    def get_metadata(self, key: str) -> str:
        """
        Read a metadata value.

        Args:
            key: Metadata path (e.g. 'instance-id', 'placement/availability-zone')

        Returns:
            The value as text

        Raises:
            MetadataError: If the value cannot be retrieved
        """
        pass

    def get_instance_id(self) -> str:
        return self.get_metadata("instance-id")

    def get_availability_zone(self) -> str:
        return self.get_metadata("placement/availability-zone")


class ProviderError(Exception):
    """
    Base exception for provider errors.

    Carries the provider's own error code and a retryability hint so callers
    can log or branch on them without inspecting SDK exception types.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        operation: str,
        code: str | None = None,
        retryable: bool = False,
        details: dict | None = None,
    ):
        self.message = message
        self.provider = provider
        self.operation = operation
        self.code = code
        self.retryable = retryable
        self.details = details or {}
        prefix = f"{code}: " if code else ""
        super().__init__(f"[{provider}] {operation}: {prefix}{message}")


class MetadataError(ProviderError):
    """Instance metadata could not be retrieved."""
    pass


class AuthenticationError(ProviderError):
    """Credentials were missing or rejected."""
    pass


class AuthorizationError(ProviderError):
    """Caller is not allowed to perform the operation."""
    pass
