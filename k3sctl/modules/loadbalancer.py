"""kube-vip and MetalLB installation."""
import logging
from typing import List

from ..config import ClusterConfig
from .kubectl import Kubectl
from .manifests import (
    METALLB_MANIFEST_URLS,
    KubeVipParams,
    MetalLBParams,
    kube_vip_daemonset,
    metallb_config,
    to_yaml,
)

logger = logging.getLogger("k3sctl.loadbalancer")


class LoadBalancerInstaller:
    """Applies the control-plane VIP and the layer2 load-balancer.

    Every manifest goes through ``kubectl apply``, so running the installer
    again against the same configuration leaves the cluster unchanged.
    """

    def __init__(self, config: ClusterConfig, kubectl: Kubectl):
        self.config = config
        self.kubectl = kubectl

    def kube_vip_manifest(self) -> str:
        return to_yaml(kube_vip_daemonset(KubeVipParams(
            address=self.config.server_address,
            interface=self.config.vip_interface,
        )))

    def metallb_manifest(self) -> str:
        return to_yaml(metallb_config(MetalLBParams(addresses=self.config.metallb_addresses)))

    def install_vip(self) -> None:
        logger.info(f"Installing kube-vip for {self.config.server_address}")
        self.kubectl.apply(self.kube_vip_manifest(), description="kube-vip DaemonSet")

    def install_metallb(self) -> None:
        logger.info("Installing MetalLB")
        for url in METALLB_MANIFEST_URLS:
            self.kubectl.apply_url(url)
        self.kubectl.apply(self.metallb_manifest(), description="MetalLB address pool")

    def install(self) -> List[str]:
        """Apply kube-vip, then MetalLB. Returns the applied address pool."""
        self.install_vip()
        self.install_metallb()
        return list(self.config.metallb_addresses)
