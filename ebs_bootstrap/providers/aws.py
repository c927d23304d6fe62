"""
AWS Cloud Provider Implementation

Wraps boto3 EC2 calls behind the StorageProvider interface.
"""

import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from .base import (
    AttachmentInfo,
    AttachmentState,
    AuthenticationError,
    AuthorizationError,
    ProviderError,
    StorageProvider,
    VolumeInfo,
)

logger = logging.getLogger(__name__)

RETRYABLE_ERROR_CODES = {
    "RequestLimitExceeded",
    "Throttling",
    "TooManyRequestsException",
    "IncorrectState",
    "ServiceUnavailable",
    "InternalError",
}

AUTHENTICATION_ERROR_CODES = {"AuthFailure", "InvalidClientTokenId"}
AUTHORIZATION_ERROR_CODES = {"UnauthorizedOperation", "AccessDenied"}


def translate_error(error: Exception, operation: str) -> ProviderError:
    """
    Convert a boto3/botocore exception into a ProviderError.

    The AWS error code and message are preserved so they reach the operator
    unchanged.

    Args:
        error: Exception raised by a boto3 call
        operation: API operation name (e.g. 'DescribeVolumes')

    Returns:
        ProviderError (or subclass) describing the failure
    """
    if isinstance(error, ClientError):
        err = error.response.get("Error", {})
        code = err.get("Code", "")
        message = err.get("Message", str(error))
        details = {"response_metadata": error.response.get("ResponseMetadata", {})}

        if code in AUTHENTICATION_ERROR_CODES:
            error_cls = AuthenticationError
        elif code in AUTHORIZATION_ERROR_CODES:
            error_cls = AuthorizationError
        else:
            error_cls = ProviderError

        return error_cls(
            message,
            provider="aws",
            operation=operation,
            code=code or None,
            retryable=code in RETRYABLE_ERROR_CODES,
            details=details,
        )

    if isinstance(error, NoCredentialsError):
        return AuthenticationError(str(error), provider="aws", operation=operation)

    # Connection and endpoint failures from botocore are transient
    return ProviderError(
        str(error),
        provider="aws",
        operation=operation,
        code=type(error).__name__,
        retryable=isinstance(error, BotoCoreError),
    )


def parse_volume(vol: Dict[str, Any]) -> VolumeInfo:
    """Build a VolumeInfo from a DescribeVolumes entry."""
    tags = {t["Key"]: t["Value"] for t in vol.get("Tags", [])}
    attachments = [
        AttachmentInfo(
            instance_id=att.get("InstanceId", ""),
            device=att.get("Device", ""),
            state=AttachmentState.parse(att.get("State", "")),
            delete_on_termination=att.get("DeleteOnTermination"),
        )
        for att in vol.get("Attachments", [])
    ]
    return VolumeInfo(
        volume_id=vol["VolumeId"],
        availability_zone=vol.get("AvailabilityZone", ""),
        state=vol.get("State", ""),
        size_gb=vol.get("Size"),
        volume_type=vol.get("VolumeType"),
        attachments=attachments,
        tags=tags,
    )


class AWSStorageProvider(StorageProvider):
    """AWS EBS implementation of StorageProvider."""

    def __init__(self, region: str = "eu-west-1", session: Optional[boto3.Session] = None):
        self.region = region
        self._session = session
        self._ec2 = None

    @property
    def ec2(self):
        if self._ec2 is None:
            session = self._session or boto3.Session()
            self._ec2 = session.client("ec2", region_name=self.region)
        return self._ec2

    @property
    def name(self) -> str:
        return "aws"

    def describe_volumes(self, filters: Dict[str, str]) -> List[VolumeInfo]:
        """List EBS volumes matching all filters."""
        aws_filters = [
            {"Name": key, "Values": [value]} for key, value in filters.items()
        ]
        try:
            response = self.ec2.describe_volumes(Filters=aws_filters)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, "DescribeVolumes") from e

        return [parse_volume(vol) for vol in response.get("Volumes", [])]

    def get_volume(self, volume_id: str) -> Optional[VolumeInfo]:
        """Get current EBS volume information, including attachments."""
        try:
            response = self.ec2.describe_volumes(VolumeIds=[volume_id])
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, "DescribeVolumes") from e

        volumes = response.get("Volumes", [])
        if not volumes:
            return None
        return parse_volume(volumes[0])

    def attach_volume(self, volume_id: str, instance_id: str, device: str) -> None:
        """Request attachment of an EBS volume to an EC2 instance."""
        try:
            response = self.ec2.attach_volume(
                VolumeId=volume_id,
                InstanceId=instance_id,
                Device=device,
            )
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, "AttachVolume") from e

        logger.debug(
            f"AttachVolume accepted for {volume_id}: state={response.get('State')}"
        )
