"""
Bootstrap sequence: locate -> attach -> format -> mount.

Each stage gates the next; any exception ends the run. Nothing here reads
process state, everything comes in through BootstrapConfig and the
collaborators passed by the caller.
"""

import logging
import os
import time
from typing import Callable

from .attachment import AttachmentReconciler
from .commands import CommandRunner
from .config import BootstrapConfig
from .exceptions import ConfigurationError
from .filesystem import ensure_initialized
from .locator import locate_volume
from .mount import ensure_mounted
from .providers.base import MetadataProvider, StorageProvider

logger = logging.getLogger(__name__)


def run_bootstrap(
    config: BootstrapConfig,
    storage: StorageProvider | None,
    metadata: MetadataProvider,
    runner: CommandRunner,
    device_exists: Callable[[str], bool] = os.path.exists,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Run every bootstrap stage for one volume/mount pair.

    Args:
        config: Run configuration
        storage: Storage provider; may be None when config.use_ebs is False
        metadata: Instance metadata provider
        runner: Command runner for blkid/mkfs/mkdir/mount
        device_exists: Local device check used while waiting for attachment
        sleep: Sleep function used between attachment attempts

    Raises:
        BootstrapError: A stage failed
        ProviderError: Metadata or provider call failed outside the retry loop
    """
    availability_zone = metadata.get_availability_zone()
    logger.info(f"Running in availability zone {availability_zone}")

    if config.use_ebs:
        if storage is None:
            raise ConfigurationError("a storage provider is required when use_ebs is set")

        volume = locate_volume(storage, config.volume_id, availability_zone)
        instance_id = metadata.get_instance_id()

        reconciler = AttachmentReconciler(
            storage,
            config.retry_budget,
            device_exists=device_exists,
            sleep=sleep,
        )
        reconciler.attach(instance_id, volume, config.block_device)
    else:
        logger.info(f"EBS disabled, using {config.block_device} as-is")

    ensure_initialized(runner, config.block_device, config.filesystem_type)
    ensure_mounted(runner, config.block_device, config.mount_point)

    logger.info(f"Bootstrap complete: {config.block_device} mounted at {config.mount_point}")
