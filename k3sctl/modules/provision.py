"""Install k3s on every node with k3sup.

The first address in the configuration becomes the initial server and owns
the etcd cluster; every following address joins it as an additional server
through the virtual IP.
"""
import logging
from typing import List

from ..config import ClusterConfig
from ..errors import CommandError, RemoteExecutionError
from .kubectl import Kubectl
from .manifests import KUBE_VIP_IMAGE, KUBE_VIP_RBAC_URL
from .models import NodeAssignment, NodeRole, ProvisioningResult
from .runner import CommandRunner
from .ssh import RemoteShell

logger = logging.getLogger("k3sctl.provision")

K3S_CONFIG_PATH = "/etc/rancher/k3s/k3s.yaml"

NODE_LABELS = [
    "gitpod.io/workload_meta=true",
    "gitpod.io/workload_ide=true",
    "gitpod.io/workload_workspace_services=true",
    "gitpod.io/workload_workspace_regular=true",
    "gitpod.io/workload_workspace_headless=true",
]

# traefik and servicelb are replaced by MetalLB
K3S_EXTRA_ARGS = " ".join(
    ["--disable traefik", "--disable servicelb"] + [f"--node-label={label}" for label in NODE_LABELS]
)


def assign_roles(config: ClusterConfig) -> List[NodeAssignment]:
    """Pair every node address with its role, keeping the configured order."""
    return [
        NodeAssignment(address=address, role=NodeRole.SERVER if index == 0 else NodeRole.JOINER, index=index)
        for index, address in enumerate(config.node_addresses)
    ]


class NodeProvisioner:
    """Provisions the configured nodes one after another, failing fast."""

    def __init__(self, config: ClusterConfig, runner: CommandRunner, shell: RemoteShell, kubectl: Kubectl):
        self.config = config
        self.runner = runner
        self.shell = shell
        self.kubectl = kubectl
        self.results: List[ProvisioningResult] = []

    def _k3sup_auth_args(self) -> List[str]:
        args = ["--user", self.config.ssh_user]
        if self.config.ssh_key:
            args += ["--ssh-key", str(self.config.ssh_key)]
        return args

    def install_server_args(self, address: str) -> List[str]:
        return [
            "k3sup", "install",
            "--cluster",
            "--ip", address,
            "--tls-san", self.config.server_address,
            "--local-path", str(self.config.kubeconfig),
            f"--k3s-extra-args={K3S_EXTRA_ARGS}",
        ] + self._k3sup_auth_args()

    def join_args(self, address: str) -> List[str]:
        return [
            "k3sup", "join",
            "--ip", address,
            "--server-ip", self.config.server_address,
            f"--k3s-extra-args={K3S_EXTRA_ARGS}",
            "--server",
        ] + self._k3sup_auth_args()

    def _k3sup(self, node: NodeAssignment, cmd: List[str], step: str) -> None:
        try:
            self.runner.run(cmd)
        except CommandError as e:
            raise RemoteExecutionError.from_error(
                f"{step} failed on {node.address}", e, node=node.address, step=step
            ) from e

    def install_server(self, node: NodeAssignment, result: ProvisioningResult) -> None:
        logger.info(f"Installing k3s to node {node.address}")
        if not self.runner.dry_run:
            self.config.kubeconfig.parent.mkdir(parents=True, exist_ok=True)
        self._k3sup(node, self.install_server_args(node.address), "k3sup install")
        result.steps.append("k3sup install")

        logger.info("Install kube-vip")
        self.shell.register_host_key(node.address)
        self.shell.execute(node.address, "sudo apt-get update", step="apt-get update")
        # make the k3s kubeconfig readable without sudo
        self.shell.execute(node.address, f"sudo chmod 644 {K3S_CONFIG_PATH}", step="chmod kubeconfig")
        self.kubectl.apply_url(KUBE_VIP_RBAC_URL)
        self.shell.execute(node.address, f"sudo ctr image pull {KUBE_VIP_IMAGE}", step="pull kube-vip image")
        result.steps.append("kube-vip bootstrap")

    def join(self, node: NodeAssignment, result: ProvisioningResult) -> None:
        logger.info(f"Joining node {node.address} to {self.config.server_address}")
        self._k3sup(node, self.join_args(node.address), "k3sup join")
        result.steps.append("k3sup join")

    def install_headers(self, node: NodeAssignment, result: ProvisioningResult) -> None:
        logger.info(f"Install linux-headers on {node.address}")
        self.shell.register_host_key(node.address)
        self.shell.execute(node.address, "sudo apt-get update", step="apt-get update")
        self.shell.execute(
            node.address,
            "sudo apt-get install -y linux-headers-$(uname -r) linux-headers-generic",
            step="install linux-headers",
        )
        result.steps.append("linux-headers")

    def provision_node(self, node: NodeAssignment) -> ProvisioningResult:
        result = ProvisioningResult(address=node.address, role=node.role, success=False)
        if node.role is NodeRole.SERVER:
            self.install_server(node, result)
        else:
            self.join(node, result)
        self.install_headers(node, result)
        result.success = True
        result.message = f"{node.role.value} ready"
        return result

    def provision(self) -> List[ProvisioningResult]:
        """Provision every node in order.

        Results are also kept on ``self.results`` so a caller can report how
        far provisioning got after a failure.

        Returns:
            List[ProvisioningResult]: one entry per node, all successful

        Raises:
            RemoteExecutionError: on the first failing node; later nodes are not attempted
            ManifestApplyError: if the kube-vip RBAC manifest cannot be applied
        """
        self.results = []
        for node in assign_roles(self.config):
            try:
                self.results.append(self.provision_node(node))
            except CommandError as e:
                step = getattr(e, "step", None) or "apply kube-vip RBAC"
                logger.error(f"Provisioning {node.address} ({node.role.value}) failed at step '{step}'")
                self.results.append(ProvisioningResult(
                    address=node.address, role=node.role, success=False, message=str(e),
                ))
                raise
        logger.info(f"Provisioned {len(self.results)} node(s)")
        return self.results
