"""
Remote command execution over native OpenSSH.
"""
import logging
from pathlib import Path
from typing import List, Optional

from ..errors import CommandError, RemoteExecutionError
from .runner import CommandResult, CommandRunner

logger = logging.getLogger("k3sctl.ssh")


class RemoteShell:
    """Runs commands on cluster nodes with the ssh client."""

    def __init__(
        self,
        runner: CommandRunner,
        username: str,
        key_path: Optional[Path] = None,
        known_hosts: Path = Path("~/.ssh/known_hosts"),
        port: int = 22,
        connect_timeout: int = 30,
    ):
        """Initialize the remote shell.

        Args:
            runner: Runner used to spawn ssh and ssh-keyscan
            username: Login for every node
            key_path: Path to SSH private key (optional)
            known_hosts: File scanned host keys are appended to
            port: SSH port (default: 22)
            connect_timeout: Connection timeout in seconds (default: 30)
        """
        self.runner = runner
        self.username = username
        self.key_path = Path(key_path).expanduser() if key_path else None
        self.known_hosts = Path(known_hosts).expanduser()
        self.port = port
        self.connect_timeout = connect_timeout

    def _ssh_base(self, host: str) -> List[str]:
        cmd = [
            'ssh',
            '-T',  # no pseudo-terminal
            '-o', 'BatchMode=yes',
            '-o', f'ConnectTimeout={self.connect_timeout}',
            '-o', f'UserKnownHostsFile={self.known_hosts}',
            '-p', str(self.port),
        ]
        if self.key_path:
            cmd.extend(['-i', str(self.key_path)])
        cmd.append(f'{self.username}@{host}')
        return cmd

    def execute(self, host: str, command: str, step: Optional[str] = None, check: bool = True) -> CommandResult:
        """Execute a command on a node.

        The command string is passed to the remote login shell unchanged, so
        expansions like ``$(uname -r)`` happen on the node.

        Raises:
            RemoteExecutionError: If ``check`` is set and the command fails
        """
        step = step or command
        logger.debug(f"[{host}] {command}")
        try:
            return self.runner.run(self._ssh_base(host) + [command], check=check)
        except CommandError as e:
            raise RemoteExecutionError.from_error(
                f"'{step}' failed on {host}", e, node=host, step=step
            ) from e

    def register_host_key(self, host: str) -> None:
        """Append the node's host keys to known_hosts (ssh-keyscan)."""
        logger.debug(f"Scanning host key of {host}")
        try:
            result = self.runner.run(['ssh-keyscan', '-p', str(self.port), host])
        except CommandError as e:
            raise RemoteExecutionError.from_error(
                f"Could not scan host key of {host}", e, node=host, step='ssh-keyscan'
            ) from e

        if self.runner.dry_run or not result.stdout.strip():
            return
        self.known_hosts.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        with open(self.known_hosts, 'a') as f:
            f.write(result.stdout if result.stdout.endswith('\n') else result.stdout + '\n')
