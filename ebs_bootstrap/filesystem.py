"""
Create a filesystem on the block device unless one is already there.

blkid is the safety gate: if it recognises any filesystem signature the
device is left alone, so re-running after a reboot never reformats data.
"""

import logging
import re

from .commands import CommandRunner
from .exceptions import ConfigurationError, FilesystemInitError

logger = logging.getLogger(__name__)

BLKID_PATH = "/usr/sbin/blkid"
MKFS_PREFIX = "/usr/sbin/mkfs."

# blkid exit status when no recognisable signature was found
BLKID_NOT_FOUND = 2

_FS_TYPE_RE = re.compile(r"^[A-Za-z0-9_]+$")


def mkfs_tool(filesystem_type: str) -> str:
    """Path of the native formatting tool for a filesystem type, e.g. /usr/sbin/mkfs.ext4."""
    if not _FS_TYPE_RE.match(filesystem_type or ""):
        raise ConfigurationError(f"invalid filesystem type: {filesystem_type!r}")
    return f"{MKFS_PREFIX}{filesystem_type}"


def has_filesystem(runner: CommandRunner, device: str) -> bool:
    """
    True if blkid finds a filesystem signature on device, False if it
    reports none (exit 2).

    Raises:
        FilesystemInitError: If blkid cannot be run or exits with any other
            status; without a clean probe there is no way to tell an empty
            device from a data disk
    """
    try:
        result = runner.run([BLKID_PATH, device], capture=True, privileged=True)
    except FileNotFoundError as e:
        raise FilesystemInitError(
            f"blkid failed: {e}", tool="blkid", filesystem_type=""
        ) from e

    if result.ok:
        return True
    if result.returncode == BLKID_NOT_FOUND:
        return False

    raise FilesystemInitError(
        f"blkid failed: exit status {result.returncode}: {result.stderr.strip()}",
        tool="blkid",
        filesystem_type="",
        result=result,
    )


def ensure_initialized(runner: CommandRunner, device: str, filesystem_type: str) -> bool:
    """
    Format device with filesystem_type if it carries no filesystem.

    Args:
        runner: Command runner
        device: Block device path
        filesystem_type: e.g. 'ext4', 'xfs'

    Returns:
        True if a filesystem was created, False if one already existed

    Raises:
        ConfigurationError: If filesystem_type is not a plain name
        FilesystemInitError: If the format tool failed
    """
    tool = mkfs_tool(filesystem_type)
    tool_name = f"mkfs.{filesystem_type}"

    logger.info(f"Checking for existing filesystem on device: {device}")
    if has_filesystem(runner, device):
        logger.info("Found existing filesystem")
        return False

    logger.info("Filesystem not present")
    logger.info(f"Creating {filesystem_type} filesystem on {device}")

    try:
        result = runner.run([tool, device], capture=False, privileged=True)
    except FileNotFoundError as e:
        raise FilesystemInitError(
            f"{tool_name} failed: {e}", tool=tool_name, filesystem_type=filesystem_type
        ) from e

    if not result.ok:
        raise FilesystemInitError(
            f"{tool_name} failed: exit status {result.returncode}",
            tool=tool_name,
            filesystem_type=filesystem_type,
            result=result,
        )

    logger.info(f"Created {filesystem_type} filesystem on {device}")
    return True
