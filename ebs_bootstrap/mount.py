"""
Mount the block device at the mount point.

A failed mount is not immediately fatal: after a reboot or a concurrent
bootstrap the device may already be mounted where we want it, so the live
mount table is consulted before giving up.
"""

import logging

from .commands import CommandRunner
from .exceptions import MountError

logger = logging.getLogger(__name__)

VERIFY_FAILED_MESSAGE = "cannot mount or verify mount. cowardly refusing to continue"


def is_mounted(mount_table: str, device: str, mount_point: str) -> bool:
    """
    True if `mount` output lists device on mount_point.

    Lines look like '/dev/xvdf on /data type ext4 (rw,relatime)'. The match
    must end at the mount point so /data does not match /data2.
    """
    entry = f"{device} on {mount_point}"
    for line in mount_table.splitlines():
        line = line.strip()
        if line == entry or line.startswith(entry + " "):
            return True
    return False


def ensure_mount_point(runner: CommandRunner, device: str, mount_point: str) -> None:
    """Create mount_point and any missing parents for mounting device."""
    try:
        result = runner.run(["mkdir", "-p", mount_point], capture=False, privileged=True)
    except FileNotFoundError as e:
        raise MountError(f"mountpoint creation failed: {e}", device, mount_point) from e

    if not result.ok:
        raise MountError(
            f"mountpoint creation failed: exit status {result.returncode}",
            device,
            mount_point,
            result=result,
        )


def ensure_mounted(runner: CommandRunner, device: str, mount_point: str) -> None:
    """
    Mount device at mount_point, accepting an existing identical mount.

    Args:
        runner: Command runner
        device: Block device path
        mount_point: Directory to mount on; created if missing

    Raises:
        MountError: If the mount point cannot be created, or the mount failed
            and the mount table does not show the device already mounted there
    """
    logger.info(f"Mounting device {device} at {mount_point}")

    ensure_mount_point(runner, device, mount_point)

    try:
        result = runner.run(["mount", device, mount_point], capture=False, privileged=True)
    except FileNotFoundError as e:
        raise MountError(f"mount failed: {e}", device, mount_point) from e

    if result.ok:
        logger.info(f"Device {device} successfully mounted at {mount_point}")
        return

    logger.info("Mount failed. perhaps already mounted, will double check")

    try:
        listing = runner.run(["mount"], capture=True)
    except FileNotFoundError as e:
        raise MountError(VERIFY_FAILED_MESSAGE, device, mount_point) from e

    if not listing.ok:
        raise MountError(VERIFY_FAILED_MESSAGE, device, mount_point, result=listing)

    if is_mounted(listing.stdout, device, mount_point):
        logger.info(f"Device {device} successfully mounted at {mount_point}")
        return

    raise MountError(VERIFY_FAILED_MESSAGE, device, mount_point, result=result)
