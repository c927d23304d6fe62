"""
Unit tests for ebs_bootstrap.config

Tests:
- Flag parsing and defaults
- Environment variable fallbacks
- Retry budget construction
- Validation
"""

import dataclasses

import pytest

from ebs_bootstrap.config import BootstrapConfig, load_config, retry_budget_from_attempts
from ebs_bootstrap.exceptions import ConfigurationError
from ebs_bootstrap.retry_utils import Bounded, Unbounded


class TestLoadConfig:
    """Tests for load_config"""

    def test_defaults(self, clean_env):
        """Defaults match the documented flag defaults"""
        config = load_config(["--ebs-volume-id", "vol-1"])

        assert config.region == "eu-west-1"
        assert config.mount_point == "/data"
        assert config.block_device == "/dev/xvdf"
        assert config.filesystem_type == "ext4"
        assert config.use_ebs is True
        assert config.use_sudo is True
        assert isinstance(config.retry_budget.max_attempts, Unbounded)

    def test_flags_override(self, clean_env):
        config = load_config([
            "--aws-region", "us-west-2",
            "--ebs-volume-id", "vol-2",
            "--mount-point", "/srv/db",
            "--block-device", "/dev/nvme1n1",
            "--filesystem-type", "xfs",
            "--max-attempts", "12",
            "--no-sudo",
            "--log-level", "debug",
        ])

        assert config.region == "us-west-2"
        assert config.volume_id == "vol-2"
        assert config.mount_point == "/srv/db"
        assert config.block_device == "/dev/nvme1n1"
        assert config.filesystem_type == "xfs"
        assert config.retry_budget.max_attempts == Bounded(12)
        assert config.use_sudo is False
        assert config.log_level == "DEBUG"

    def test_environment_fallbacks(self, clean_env):
        """Environment variables are used when flags are absent"""
        clean_env.setenv("AWS_REGION", "ap-northeast-1")
        clean_env.setenv("EBS_VOLUME_ID", "vol-env")
        clean_env.setenv("EBS_MAX_ATTEMPTS", "3")
        clean_env.setenv("EBS_FILESYSTEM_TYPE", "xfs")

        config = load_config([])

        assert config.region == "ap-northeast-1"
        assert config.volume_id == "vol-env"
        assert config.filesystem_type == "xfs"
        assert config.retry_budget.max_attempts == Bounded(3)

    def test_flag_beats_environment(self, clean_env):
        clean_env.setenv("EBS_VOLUME_ID", "vol-env")

        assert load_config(["--ebs-volume-id", "vol-flag"]).volume_id == "vol-flag"

    def test_no_use_ebs_needs_no_volume(self, clean_env):
        """Instance-store mode does not require a volume id"""
        config = load_config(["--no-use-ebs", "--block-device", "/dev/nvme1n1"])

        assert config.use_ebs is False
        assert config.volume_id == ""

    def test_use_ebs_from_environment(self, clean_env):
        clean_env.setenv("EBS_USE_EBS", "false")

        assert load_config([]).use_ebs is False

    def test_bad_boolean_environment(self, clean_env):
        clean_env.setenv("EBS_USE_EBS", "maybe")

        with pytest.raises(ConfigurationError):
            load_config([])

    def test_bad_integer_environment(self, clean_env):
        clean_env.setenv("EBS_MAX_ATTEMPTS", "lots")

        with pytest.raises(ConfigurationError):
            load_config(["--ebs-volume-id", "vol-1"])

    def test_missing_volume_id_rejected(self, clean_env):
        with pytest.raises(ConfigurationError, match="ebs-volume-id"):
            load_config([])

    def test_relative_mount_point_rejected(self, clean_env):
        with pytest.raises(ConfigurationError, match="absolute"):
            load_config(["--ebs-volume-id", "vol-1", "--mount-point", "data"])

    def test_unknown_log_level_rejected(self, clean_env):
        with pytest.raises(ConfigurationError, match="log level"):
            load_config(["--ebs-volume-id", "vol-1", "--log-level", "chatty"])


class TestRetryBudgetFromAttempts:

    def test_zero_is_unbounded(self):
        assert retry_budget_from_attempts(0).is_unbounded

    def test_negative_is_unbounded(self):
        assert retry_budget_from_attempts(-1).is_unbounded

    def test_positive_is_bounded(self):
        budget = retry_budget_from_attempts(7)

        assert budget.max_attempts == Bounded(7)
        assert budget.min_delay == 5
        assert budget.max_delay == 100
        assert budget.factor == 2
        assert budget.jitter is False


class TestBootstrapConfig:

    def test_config_is_immutable(self):
        config = BootstrapConfig(volume_id="vol-1")

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.volume_id = "vol-2"
