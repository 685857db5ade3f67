"""Preflight check for the executables k3sctl drives."""
import logging
import shutil
from typing import Dict, Iterable, Optional

from ..errors import MissingDependencyError

logger = logging.getLogger("k3sctl.dependencies")

INSTALL_HINTS: Dict[str, str] = {
    "k3sup": "please visit https://k3sup.dev for installation instructions",
    "kubectl": "please visit https://kubernetes.io/docs/tasks/tools for installation instructions",
    "helm": "please visit https://helm.sh/docs/intro/install for installation instructions",
    "ssh": "please install the OpenSSH client (e.g. apt-get install openssh-client)",
}

INSTALL_TOOLS = ("k3sup", "kubectl", "helm", "ssh")
UNINSTALL_TOOLS = ("ssh",)


def check_dependencies(tools: Iterable[str] = INSTALL_TOOLS, path: Optional[str] = None) -> None:
    """Make sure every tool resolves on PATH.

    Raises:
        MissingDependencyError: naming the first tool that cannot be found
    """
    for tool in tools:
        location = shutil.which(tool, path=path)
        if location is None:
            raise MissingDependencyError(tool, INSTALL_HINTS.get(tool, "please install it and retry"))
        logger.debug(f"Found {tool} at {location}")
