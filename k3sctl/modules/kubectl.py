"""Thin wrapper around the kubectl CLI."""
import logging
from pathlib import Path
from typing import List, Optional

from ..errors import CommandError, ManifestApplyError
from .manifests import manifest_names
from .runner import CommandResult, CommandRunner

logger = logging.getLogger("k3sctl.kubectl")


class Kubectl:
    """Applies manifests to the cluster with kubectl."""

    def __init__(self, runner: CommandRunner, kubeconfig: Optional[Path] = None):
        self.runner = runner
        self.kubeconfig = kubeconfig

    def _base(self) -> List[str]:
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd += ["--kubeconfig", str(self.kubeconfig)]
        return cmd

    def _run(self, args: List[str], what: str, input: Optional[str] = None) -> CommandResult:
        try:
            return self.runner.run(self._base() + args, input=input)
        except CommandError as e:
            raise ManifestApplyError.from_error(f"Failed to apply {what}", e) from e

    def apply_url(self, url: str) -> CommandResult:
        """kubectl apply -f <url>"""
        logger.info(f"Applying {url}")
        return self._run(["apply", "-f", url], url)

    def apply(self, manifest: str, description: Optional[str] = None) -> CommandResult:
        """Apply a rendered manifest passed on stdin."""
        what = description or ", ".join(manifest_names(manifest)) or "manifest"
        logger.info(f"Applying {what}")
        return self._run(["apply", "-f", "-"], what, input=manifest)

    def replace_force(self, manifest: str, description: Optional[str] = None) -> CommandResult:
        """Delete and recreate the objects in ``manifest``.

        Unlike ``create`` this succeeds whether or not the objects exist.
        """
        what = description or ", ".join(manifest_names(manifest)) or "manifest"
        logger.info(f"Replacing {what}")
        return self._run(["replace", "--force", "-f", "-"], what, input=manifest)
