"""ToolRunner - runs external build tools as child processes."""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from apkbuild.exceptions import ToolExecutionError

logger = logging.getLogger(__name__)


def _masked(command: list[str], redact: Sequence[str]) -> list[str]:
    """Replace the value after each redacted option with ****."""
    options = {str(option) for option in redact}
    masked = []
    hide = False
    for arg in command:
        masked.append("****" if hide else arg)
        hide = arg in options
    return masked


@dataclass
class CommandResult:
    """Result of a completed external command."""

    command: list[str]
    exit_code: int
    duration: float


class ToolRunner:
    """
    Run external tools with the parent's stdin/stdout/stderr.

    Output is not captured, so prompts from interactive tools such as
    jarsigner reach the terminal. No timeout is applied.
    """

    def run(
        self,
        command: list[str],
        cwd: Optional[str] = None,
        redact: Sequence[str] = (),
    ) -> CommandResult:
        """
        Run a command to completion.

        Args:
            command: Program followed by its arguments.
            cwd: Working directory for the child. Inherited if None.
            redact: Options whose following value is masked in log and error
                messages, e.g. ["-storepass"].

        Returns:
            CommandResult for a zero exit.

        Raises:
            ToolExecutionError: If the program cannot be launched or exits non-zero.
        """
        command = [str(arg) for arg in command]
        printable = subprocess.list2cmdline(_masked(command, redact))
        logger.info(f"$ {printable}")

        start = time.time()
        try:
            result = subprocess.run(command, cwd=cwd)
        except OSError as e:
            raise ToolExecutionError(
                f"Could not launch {command[0]}: {e}",
                command=command,
                cause=e,
            ) from e
        duration = time.time() - start

        if result.returncode != 0:
            raise ToolExecutionError(
                f"Error when running command {printable}: exit status {result.returncode}",
                command=command,
                exit_code=result.returncode,
            )

        logger.debug(f"{command[0]} finished in {duration:.2f}s")
        return CommandResult(command=command, exit_code=result.returncode, duration=duration)
