"""Execution of external commands.

Every k3sup, kubectl, helm and ssh invocation goes through a CommandRunner so
the install sequence can be dry-run or recorded in tests without touching
real hosts.
"""
import logging
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..errors import CommandError

logger = logging.getLogger("k3sctl.runner")


@dataclass
class CommandResult:
    """Exit status and captured output of a command."""
    cmd: List[str]
    returncode: int = 0
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs commands locally with subprocess."""

    dry_run = False

    def __init__(self, env: Optional[Dict[str, str]] = None):
        self.env = env

    def run(
        self,
        cmd: List[str],
        *,
        input: Optional[str] = None,
        check: bool = True,
        capture_output: bool = True,
    ) -> CommandResult:
        """Run a command and return its result.

        Args:
            cmd: Command and arguments
            input: Text fed to the command's stdin
            check: Raise CommandError on a non-zero exit status
            capture_output: Capture stdout/stderr instead of inheriting them

        Returns:
            CommandResult: exit status and captured output

        Raises:
            CommandError: If ``check`` is set and the command fails or cannot be started
        """
        cmd_str = ' '.join(cmd)
        logger.debug(f"Running: {cmd_str}")
        try:
            proc = subprocess.run(
                cmd,
                input=input,
                text=True,
                env=self.env,
                stdout=subprocess.PIPE if capture_output else None,
                stderr=subprocess.PIPE if capture_output else None,
            )
        except OSError as e:
            raise CommandError(f"Could not run {cmd[0]}: {e}", cmd=cmd) from e

        result = CommandResult(cmd=list(cmd), returncode=proc.returncode,
                               stdout=proc.stdout or '', stderr=proc.stderr or '')
        if result.stdout:
            logger.debug(f"Output:\n{result.stdout}")
        if check and not result.ok:
            logger.debug(f"Command failed: {cmd_str} (exit code: {result.returncode})")
            raise CommandError(
                f"Command failed: {cmd_str}",
                cmd=result.cmd,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result


class DryRunRunner(CommandRunner):
    """Logs and records commands instead of running them."""

    dry_run = True

    def __init__(self):
        super().__init__()
        self.commands: List[List[str]] = []
        self.inputs: List[Optional[str]] = []

    def run(self, cmd, *, input=None, check=True, capture_output=True) -> CommandResult:
        logger.info(f"[dry-run] {' '.join(cmd)}")
        self.commands.append(list(cmd))
        self.inputs.append(input)
        return CommandResult(cmd=list(cmd))

