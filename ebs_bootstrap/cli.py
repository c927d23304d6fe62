"""
ebs-bootstrap command line entry point.

Usage:
    ebs-bootstrap --aws-region eu-west-1 --ebs-volume-id vol-0123456789abcdef0

    # Instance store only: format and mount, no EBS calls
    ebs-bootstrap --no-use-ebs --block-device /dev/nvme1n1 --mount-point /data
"""

import logging
import sys
from typing import Optional, Sequence

from .bootstrap import run_bootstrap
from .commands import SubprocessRunner
from .config import load_config
from .exceptions import BootstrapError
from .providers import ProviderError, get_metadata_provider, get_storage_provider

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout,
    )
    # boto3 is chatty at DEBUG
    for noisy in ("botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the bootstrap. Returns 0 on success, 1 on any failure."""
    try:
        config = load_config(argv)
    except BootstrapError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(config.log_level)
    logger.info(
        f"Starting ebs-bootstrap: volume={config.volume_id or '-'} "
        f"device={config.block_device} mount_point={config.mount_point} "
        f"fs={config.filesystem_type} use_ebs={config.use_ebs} "
        f"max_attempts={config.retry_budget.max_attempts}"
    )

    runner = SubprocessRunner(use_sudo=config.use_sudo)

    try:
        storage = get_storage_provider(region=config.region) if config.use_ebs else None
        metadata = get_metadata_provider()
        run_bootstrap(config, storage, metadata, runner)
    except (BootstrapError, ProviderError) as e:
        logger.error(f"Bootstrap failed: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
