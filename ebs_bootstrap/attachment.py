"""
Attach a volume to the running instance and wait until it is usable.

The provider accepts AttachVolume asynchronously, so success is only
declared once the provider reports the attachment as 'attached' AND the
block device has appeared on this host. Between attempts the loop backs off
exponentially. The attach request itself is sent at most once per run.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable

from .exceptions import AttachFailedError, DevicePropagationError
from .providers.base import StorageProvider, VolumeInfo
from .retry_utils import RetryBudget

logger = logging.getLogger(__name__)


class MaxAttemptsExceeded(Exception):
    """Placeholder error for an attempt that saw no explicit failure."""

    def __init__(self):
        super().__init__("max attempts exceeded")


@dataclass
class AttachmentProgress:
    """Loop state, kept for diagnostics after attach() returns or raises."""
    attempts: int = 0
    attach_started: bool = False
    attached: bool = False
    already_attached: bool = False
    last_error: Exception | None = None
    slept: float = 0.0


class AttachmentReconciler:
    """
    Drives the attach-and-confirm loop for one volume.

    Example:
        reconciler = AttachmentReconciler(storage, RetryBudget.bounded(10))
        reconciler.attach('i-12345', volume, '/dev/xvdf')
    """

    def __init__(
        self,
        storage: StorageProvider,
        retry_budget: RetryBudget,
        device_exists: Callable[[str], bool] = os.path.exists,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.storage = storage
        self.retry_budget = retry_budget
        self.device_exists = device_exists
        self.sleep = sleep
        self.progress = AttachmentProgress()

    def attach(self, instance_id: str, volume: VolumeInfo, device: str) -> None:
        """
        Ensure the volume is attached to instance_id at device.

        Args:
            instance_id: The running instance
            volume: Volume as returned by the locator
            device: Block device path the volume should appear as

        Raises:
            AttachFailedError: If the retry budget ran out before the
                attachment was confirmed
        """
        self.progress = progress = AttachmentProgress()
        volume_id = volume.volume_id

        logger.info(f"Will attach volume {volume_id} to instance id {instance_id}")

        # Already attached to us, e.g. after a reboot
        if volume.attached_instance == instance_id:
            logger.info(
                f"Volume {volume_id} is already attached to instance {instance_id} "
                f"as device {volume.attachments[0].device}"
            )
            progress.already_attached = True
            progress.attached = True
            return

        backoff = self.retry_budget.new_backoff()

        for attempt in self.retry_budget.attempts():
            if attempt != 0:
                delay = backoff.duration()
                logger.info(
                    f"Waiting for attachment to complete. Retrying in {delay:g} seconds. "
                    f"Attempts: {attempt}"
                )
                self.sleep(delay)
                progress.slept += delay

            progress.attempts += 1
            if self._attempt(instance_id, volume_id, device):
                progress.attached = True
                break

        if not progress.attached:
            raise AttachFailedError(
                volume_id, progress.last_error, progress.attempts
            ) from progress.last_error

        logger.info(
            f"Attached volume {volume_id} to instance {instance_id} as device {device}"
        )

    def _attempt(self, instance_id: str, volume_id: str, device: str) -> bool:
        """One pass of issue-then-confirm. Records failures in self.progress."""
        progress = self.progress
        progress.last_error = MaxAttemptsExceeded()

        if not progress.attach_started:
            try:
                self.storage.attach_volume(volume_id, instance_id, device)
            except Exception as e:
                logger.warning(f"Attach request for {volume_id} failed: {e}")
                progress.last_error = e
                return False
            progress.attach_started = True
            logger.info("Volume attachment started. Checking for status")

        try:
            current = self.storage.get_volume(volume_id)
        except Exception as e:
            logger.warning(f"Describing volume {volume_id} failed: {e}")
            progress.last_error = e
            return False

        if current is None or not current.attachments:
            logger.debug(f"Volume {volume_id} reports no attachments yet")
            return False

        attachment = current.attachments[0]
        if not attachment.is_attached:
            logger.debug(f"Volume {volume_id} attachment state is {attachment.state}")
            return False

        if not self.device_exists(device):
            logger.debug(f"Volume {volume_id} attached but {device} not present yet")
            progress.last_error = DevicePropagationError(device)
            return False

        return True


def attach_volume(
    storage: StorageProvider,
    instance_id: str,
    volume: VolumeInfo,
    device: str,
    retry_budget: RetryBudget,
    **kwargs
) -> AttachmentProgress:
    """Convenience wrapper: run one AttachmentReconciler and return its progress."""
    reconciler = AttachmentReconciler(storage, retry_budget, **kwargs)
    reconciler.attach(instance_id, volume, device)
    return reconciler.progress
