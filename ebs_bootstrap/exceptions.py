"""Errors raised by the bootstrap stages."""


class BootstrapError(Exception):
    """Base exception for bootstrap failures."""
    pass


class ConfigurationError(BootstrapError):
    """Invalid or missing configuration."""
    pass


class VolumeNotFoundError(BootstrapError):
    """No volume matched the requested id in the availability zone."""

    def __init__(self, volume_id: str, availability_zone: str):
        self.volume_id = volume_id
        self.availability_zone = availability_zone
        super().__init__(
            f"cannot find volume with volume-id: {volume_id} "
            f"in availability zone {availability_zone}"
        )


class DevicePropagationError(BootstrapError):
    """Provider reports the volume attached but the OS device is not visible yet."""

    def __init__(self, device: str):
        self.device = device
        super().__init__(f"block device {device} does not exist yet")


class AttachFailedError(BootstrapError):
    """The attachment did not complete within the retry budget."""

    def __init__(self, volume_id: str, last_error: Exception | None, attempts: int):
        self.volume_id = volume_id
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"attaching volume failed: {volume_id} after {attempts} attempts: {last_error}"
        )


class FilesystemInitError(BootstrapError):
    """Creating a filesystem on the device failed."""

    def __init__(self, message: str, tool: str, filesystem_type: str, result=None):
        self.tool = tool
        self.filesystem_type = filesystem_type
        self.result = result
        super().__init__(message)


class MountError(BootstrapError):
    """The device could not be mounted, or the mount could not be verified."""

    def __init__(self, message: str, device: str, mount_point: str, result=None):
        self.device = device
        self.mount_point = mount_point
        self.result = result
        super().__init__(f"{message} ({device} on {mount_point})")
