"""Run configuration for ebs-bootstrap.

Flags take precedence; each one falls back to an environment variable and
then to a built-in default. The result is a frozen BootstrapConfig that is
passed explicitly to every stage.
"""

import argparse
import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .exceptions import ConfigurationError
from .retry_utils import RetryBudget

DEFAULT_REGION = "eu-west-1"
DEFAULT_MOUNT_POINT = "/data"
DEFAULT_BLOCK_DEVICE = "/dev/xvdf"
DEFAULT_FILESYSTEM_TYPE = "ext4"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class BootstrapConfig:
    """Immutable settings for one bootstrap run."""
    region: str = DEFAULT_REGION
    volume_id: str = ""
    mount_point: str = DEFAULT_MOUNT_POINT
    block_device: str = DEFAULT_BLOCK_DEVICE
    filesystem_type: str = DEFAULT_FILESYSTEM_TYPE
    use_ebs: bool = True
    retry_budget: RetryBudget = field(default_factory=RetryBudget.unbounded)
    use_sudo: bool = True
    log_level: str = "INFO"

    def validate(self) -> None:
        """Raise ConfigurationError for settings that cannot work."""
        if self.use_ebs and not self.volume_id:
            raise ConfigurationError(
                "--ebs-volume-id (or EBS_VOLUME_ID) is required when --use-ebs is set"
            )
        if not self.block_device:
            raise ConfigurationError("--block-device must not be empty")
        if not os.path.isabs(self.mount_point):
            raise ConfigurationError(
                f"--mount-point must be an absolute path, got {self.mount_point!r}"
            )
        if not self.filesystem_type:
            raise ConfigurationError("--filesystem-type must not be empty")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"unknown log level: {self.log_level}")


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def retry_budget_from_attempts(max_attempts: int) -> RetryBudget:
    """0 (or negative) means retry until success."""
    if max_attempts <= 0:
        return RetryBudget.unbounded()
    return RetryBudget.bounded(max_attempts)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ebs-bootstrap",
        description="Attach an EBS volume to this instance, format it if needed and mount it",
    )
    parser.add_argument(
        "--aws-region",
        default=os.environ.get("AWS_REGION", DEFAULT_REGION),
        help=f"AWS region this instance is on (default: {DEFAULT_REGION})",
    )
    parser.add_argument(
        "--ebs-volume-id",
        default=os.environ.get("EBS_VOLUME_ID", ""),
        help="EBS volume to attach to this node",
    )
    parser.add_argument(
        "--mount-point",
        default=os.environ.get("EBS_MOUNT_POINT", DEFAULT_MOUNT_POINT),
        help=f"EBS volume mount point (default: {DEFAULT_MOUNT_POINT})",
    )
    parser.add_argument(
        "--block-device",
        default=os.environ.get("EBS_BLOCK_DEVICE", DEFAULT_BLOCK_DEVICE),
        help=f"Block device to attach as (default: {DEFAULT_BLOCK_DEVICE})",
    )
    parser.add_argument(
        "--filesystem-type",
        default=os.environ.get("EBS_FILESYSTEM_TYPE", DEFAULT_FILESYSTEM_TYPE),
        help=f"Linux filesystem format type (default: {DEFAULT_FILESYSTEM_TYPE})",
    )
    parser.add_argument(
        "--use-ebs",
        action=argparse.BooleanOptionalAction,
        default=_env_bool("EBS_USE_EBS", True),
        help="Use EBS instead of instance store (default: true)",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=_env_int("EBS_MAX_ATTEMPTS", 0),
        help="Retry attachment until it fails n times; 0 retries forever (default: 0)",
    )
    parser.add_argument(
        "--no-sudo",
        action="store_true",
        default=_env_bool("EBS_NO_SUDO", False),
        help="Run blkid, mkfs, mkdir and mount directly instead of through sudo",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    return parser


def load_config(argv: Optional[Sequence[str]] = None) -> BootstrapConfig:
    """Parse flags (falling back to the environment) into a validated config."""
    args = build_parser().parse_args(argv)

    config = BootstrapConfig(
        region=args.aws_region,
        volume_id=args.ebs_volume_id,
        mount_point=args.mount_point,
        block_device=args.block_device,
        filesystem_type=args.filesystem_type,
        use_ebs=args.use_ebs,
        retry_budget=retry_budget_from_attempts(args.max_attempts),
        use_sudo=not args.no_sudo,
        log_level=args.log_level.upper(),
    )
    config.validate()
    return config
