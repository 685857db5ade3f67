"""Best-effort removal of k3s from every node."""
import logging
from typing import List

from ..config import ClusterConfig
from ..errors import RemoteExecutionError
from .models import TeardownResult
from .ssh import RemoteShell

logger = logging.getLogger("k3sctl.teardown")

K3S_UNINSTALL_SCRIPT = "/usr/local/bin/k3s-uninstall.sh"


def is_affirmative(reply: str) -> bool:
    """Only a single 'y' or 'Y' confirms."""
    return reply in ("y", "Y")


class Teardown:
    """Runs the k3s uninstall script on every configured node.

    A failing node does not stop the others from being attempted.
    """

    def __init__(self, config: ClusterConfig, shell: RemoteShell):
        self.config = config
        self.shell = shell

    def run(self) -> List[TeardownResult]:
        results = []
        for address in self.config.node_addresses:
            logger.info(f"Uninstalling k3s from {address}")
            try:
                self.shell.execute(address, K3S_UNINSTALL_SCRIPT, step="k3s-uninstall")
            except RemoteExecutionError as e:
                logger.error(f"Uninstall failed on {address}: {e}")
                results.append(TeardownResult(address, False, str(e)))
                continue
            results.append(TeardownResult(address, True))
        failed = [r.address for r in results if not r.success]
        if failed:
            logger.warning(f"Uninstall failed on {len(failed)} node(s): {', '.join(failed)}")
        return results
