"""Blocking invocation of external programs."""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external process."""

    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def reason(self) -> str:
        """Best available explanation for a failed command."""
        text = (self.stderr or self.stdout or "").strip()
        if text:
            return text
        return f"{self.command[0]} exited with status {self.returncode}"


def command_exists(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None


def run_command(
    command: List[str],
    capture: bool = True,
    input_text: Optional[str] = None,
) -> CommandResult:
    """
    Run an external command and wait for it to exit.

    Args:
        command: Program and arguments
        capture: Capture stdout/stderr instead of sharing the operator's terminal
        input_text: Optional text written to the process's stdin

    Returns:
        CommandResult: Exit status and captured output
    """
    logger.debug("Running: %s", " ".join(command))

    try:
        completed = subprocess.run(
            command,
            capture_output=capture,
            text=True,
            input=input_text,
        )
    except FileNotFoundError:
        return CommandResult(command, COMMAND_NOT_FOUND, stderr=f"{command[0]}: command not found")

    result = CommandResult(
        command,
        completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )

    if not result.ok:
        logger.debug("Command failed (%s): %s", result.returncode, result.reason)

    return result
