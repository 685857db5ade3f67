"""cert-manager installation."""
import logging

from ..config import ClusterConfig
from .helm import Helm, ReleaseSpec
from .manifests import CERT_MANAGER_NAMESPACE

logger = logging.getLogger("k3sctl.cert_manager")

CERT_MANAGER_REPO = "https://charts.jetstack.io"


def cert_manager_release() -> ReleaseSpec:
    return ReleaseSpec(
        name="cert-manager",
        chart="cert-manager",
        namespace=CERT_MANAGER_NAMESPACE,
        repo_url=CERT_MANAGER_REPO,
        set_values={"installCRDs": "true"},
    )


class CertManagerInstaller:
    """Installs or upgrades cert-manager with an atomic helm release."""

    def __init__(self, config: ClusterConfig, helm: Helm):
        self.config = config
        self.helm = helm

    def install(self) -> ReleaseSpec:
        logger.info("Installing cert-manager...")
        release = cert_manager_release()
        self.helm.upgrade_install(release)
        return release
