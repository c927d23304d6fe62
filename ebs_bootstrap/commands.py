"""
Command execution for the OS-level steps (blkid, mkfs, mkdir, mount).

The reconcilers only see CommandRunner, so tests can substitute a fake that
records argv and returns canned results instead of touching real devices.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Exit status and output of a finished command."""
    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(ABC):
    """Runs external commands."""

    @abstractmethod
    def run(
        self,
        argv: Sequence[str],
        capture: bool = True,
        privileged: bool = False,
    ) -> CommandResult:
        """
        Run a command to completion.

        Args:
            argv: Program and arguments
            capture: Capture stdout/stderr; when False they go straight to the
                operator's terminal
            privileged: Command needs root

        Returns:
            CommandResult with the exit status. A non-zero exit is not an
            exception; callers decide what it means.

        Raises:
            FileNotFoundError: If the program does not exist
        """
        pass


class SubprocessRunner(CommandRunner):
    """CommandRunner backed by subprocess.run, escalating with sudo."""

    def __init__(self, use_sudo: bool = True, sudo_path: str = "sudo"):
        self.use_sudo = use_sudo
        self.sudo_path = sudo_path

    def run(
        self,
        argv: Sequence[str],
        capture: bool = True,
        privileged: bool = False,
    ) -> CommandResult:
        cmd = list(argv)
        if privileged and self.use_sudo:
            cmd = [self.sudo_path, *cmd]

        logger.debug(f"Running: {' '.join(cmd)}")
        completed = subprocess.run(
            cmd,
            capture_output=capture,
            text=True,
            check=False,
        )
        result = CommandResult(
            argv=cmd,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        logger.debug(f"Exit {result.returncode}: {' '.join(cmd)}")
        return result
