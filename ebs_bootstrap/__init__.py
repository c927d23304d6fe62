"""
Attach, format and mount a persistent EBS volume at instance boot.
"""

__version__ = "0.1.0"

from .attachment import AttachmentProgress, AttachmentReconciler, attach_volume
from .bootstrap import run_bootstrap
from .commands import CommandResult, CommandRunner, SubprocessRunner
from .config import BootstrapConfig, load_config
from .exceptions import (
    AttachFailedError,
    BootstrapError,
    ConfigurationError,
    DevicePropagationError,
    FilesystemInitError,
    MountError,
    VolumeNotFoundError,
)
from .filesystem import ensure_initialized
from .locator import locate_volume
from .mount import ensure_mounted
from .retry_utils import Backoff, Bounded, RetryBudget, Unbounded

__all__ = [
    # Stages
    "locate_volume",
    "AttachmentReconciler",
    "AttachmentProgress",
    "attach_volume",
    "ensure_initialized",
    "ensure_mounted",
    "run_bootstrap",
    # Configuration
    "BootstrapConfig",
    "load_config",
    "RetryBudget",
    "Backoff",
    "Bounded",
    "Unbounded",
    # Commands
    "CommandRunner",
    "CommandResult",
    "SubprocessRunner",
    # Exceptions
    "BootstrapError",
    "ConfigurationError",
    "VolumeNotFoundError",
    "AttachFailedError",
    "DevicePropagationError",
    "FilesystemInitError",
    "MountError",
]
