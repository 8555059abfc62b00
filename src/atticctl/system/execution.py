# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.12
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/system/execution.py

"""Subprocess execution for engine commands."""

import shlex
import subprocess
from dataclasses import dataclass

from loguru import logger


# Shell convention for "command not found"
COMMAND_NOT_FOUND = 127


@dataclass
class CommandResult:
    """Outcome of a finished command."""
    returncode: int
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandExecutor:
    """Runs external commands.

    Output is streamed to the terminal, since the engine's listings and
    statistics are the point of most commands.
    """

    @staticmethod
    def format_command(cmd: list[str]) -> str:
        return shlex.join(cmd)

    @staticmethod
    def run(cmd: list[str]) -> CommandResult:
        """Run a command and wait for it.

        Args:
            cmd: Command and arguments

        Returns:
            CommandResult with the exit status
        """
        logger.debug(f"Running: {CommandExecutor.format_command(cmd)}")
        try:
            completed = subprocess.run(cmd)
            result = CommandResult(completed.returncode)
        except FileNotFoundError:
            logger.error(f"Command not found: {cmd[0]}")
            result = CommandResult(COMMAND_NOT_FOUND, stderr=f"{cmd[0]}: command not found")

        logger.debug(f"Exit status {result.returncode}: {cmd[0]}")
        return result
