"""Chart installs through the helm CLI."""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import ChartInstallError, CommandError
from .runner import CommandResult, CommandRunner

logger = logging.getLogger("k3sctl.helm")


@dataclass(frozen=True)
class ReleaseSpec:
    """A chart release installed straight from a repository URL."""
    name: str
    chart: str
    namespace: str
    repo_url: str
    version: Optional[str] = None
    set_values: Dict[str, str] = field(default_factory=dict)
    create_namespace: bool = True
    atomic: bool = True
    wait: bool = True
    reset_values: bool = True
    timeout: Optional[str] = None


class Helm:
    """Runs ``helm upgrade --install`` for a ReleaseSpec."""

    def __init__(self, runner: CommandRunner, kubeconfig: Optional[Path] = None):
        self.runner = runner
        self.kubeconfig = kubeconfig

    def _base(self) -> List[str]:
        cmd = ["helm"]
        if self.kubeconfig:
            cmd += ["--kubeconfig", str(self.kubeconfig)]
        return cmd

    def upgrade_install_args(self, rel: ReleaseSpec) -> List[str]:
        argv = self._base() + ["upgrade"]
        if rel.atomic:
            # --atomic rolls back (or uninstalls a first release) on failure
            argv += ["--atomic", "--cleanup-on-fail"]
        if rel.create_namespace:
            argv += ["--create-namespace"]
        argv += ["--install", "--namespace", rel.namespace, "--repo", rel.repo_url]
        if rel.reset_values:
            argv += ["--reset-values"]
        for key, value in rel.set_values.items():
            argv += ["--set", f"{key}={value}"]
        if rel.version:
            argv += ["--version", rel.version]
        if rel.wait:
            argv += ["--wait"]
            if rel.timeout:
                argv += ["--timeout", rel.timeout]
        argv += [rel.name, rel.chart]
        return argv

    def upgrade_install(self, rel: ReleaseSpec) -> CommandResult:
        logger.info(f"Installing Helm release '{rel.name}' in namespace '{rel.namespace}'")
        try:
            result = self.runner.run(self.upgrade_install_args(rel))
        except CommandError as e:
            raise ChartInstallError.from_error(f"Helm release '{rel.name}' failed", e) from e
        logger.info(f"Helm release '{rel.name}' installed successfully.")
        return result
