from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from k3sctl.config import config_from_mapping
from k3sctl.errors import CommandError
from k3sctl.modules.runner import CommandResult, CommandRunner


@dataclass
class RecordedCall:
    cmd: List[str]
    input: Optional[str] = None


class RecordingRunner(CommandRunner):
    """Records every call and answers from canned results.

    ``failures`` maps a substring of the joined command line to the exit code
    the matching call returns; ``outputs`` does the same for stdout.
    """

    def __init__(self, failures: Dict[str, int] = None, outputs: Dict[str, str] = None, dry_run: bool = False):
        super().__init__()
        self.failures = failures or {}
        self.outputs = outputs or {}
        self.calls: List[RecordedCall] = []
        self.dry_run = dry_run

    def run(self, cmd, *, input=None, check=True, capture_output=True) -> CommandResult:
        self.calls.append(RecordedCall(list(cmd), input))
        line = " ".join(cmd)
        returncode = next((rc for pattern, rc in self.failures.items() if pattern in line), 0)
        stdout = next((out for pattern, out in self.outputs.items() if pattern in line), "")
        stderr = "boom" if returncode else ""
        if check and returncode:
            raise CommandError(f"Command failed: {line}", cmd=list(cmd), returncode=returncode,
                               stdout=stdout, stderr=stderr)
        return CommandResult(cmd=list(cmd), returncode=returncode, stdout=stdout, stderr=stderr)

    @property
    def commands(self) -> List[List[str]]:
        return [call.cmd for call in self.calls]

    @property
    def lines(self) -> List[str]:
        return [" ".join(cmd) for cmd in self.commands]


@pytest.fixture
def make_runner():
    return RecordingRunner


@pytest.fixture
def runner():
    return RecordingRunner(dry_run=True)


BASE_ENV = {
    "IP_LIST": "10.0.0.1,10.0.0.2",
    "KUBE_VIP": "10.0.0.100",
    "DOMAIN": "example.com",
    "USER": "ubuntu",
}


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = dict(BASE_ENV)
        values.setdefault("KUBECONFIG", str(tmp_path / "kube" / "config"))
        values.setdefault("KNOWN_HOSTS", str(tmp_path / "known_hosts"))
        values.update(overrides)
        return config_from_mapping(values)
    return _make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def cloudflare_config(make_config):
    return make_config(MANAGED_DNS_PROVIDER="cloudflare", CLOUDFLARE_API_KEY="tok")


@pytest.fixture
def env_file(tmp_path):
    def _write(**overrides):
        values = dict(BASE_ENV)
        values["KUBECONFIG"] = str(tmp_path / "kube" / "config")
        values["KNOWN_HOSTS"] = str(tmp_path / "known_hosts")
        values.update(overrides)
        path = tmp_path / ".env"
        path.write_text("".join(f"{k}={v}\n" for k, v in values.items()))
        return path
    return _write
