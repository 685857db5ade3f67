"""Managed DNS integration for cert-manager DNS-01 challenges."""
import logging
from typing import Optional

from ..config import ClusterConfig
from ..errors import UnsupportedProviderError
from .kubectl import Kubectl
from .manifests import (
    CERT_MANAGER_NAMESPACE,
    CLOUDFLARE_SECRET_KEY,
    CLOUDFLARE_SECRET_NAME,
    ClusterIssuerParams,
    SecretParams,
    cloudflare_cluster_issuer,
    opaque_secret,
    to_yaml,
)
from .models import DnsProvider

logger = logging.getLogger("k3sctl.dns")


class DnsInstaller:
    """Wires cert-manager to the configured DNS provider."""

    def __init__(self, config: ClusterConfig, kubectl: Kubectl):
        self.config = config
        self.kubectl = kubectl

    def issuer_manifest(self) -> str:
        return to_yaml(cloudflare_cluster_issuer(ClusterIssuerParams(
            domain=self.config.domain,
            email=self.config.acme_email,
        )))

    def secret_manifest(self) -> str:
        token = self.config.cloudflare_api_token.get_secret_value()
        return to_yaml(opaque_secret(SecretParams(
            name=CLOUDFLARE_SECRET_NAME,
            namespace=CERT_MANAGER_NAMESPACE,
            literals={CLOUDFLARE_SECRET_KEY: token},
        )))

    def install_cloudflare(self) -> None:
        logger.info("Installing Cloudflare managed DNS")
        self.kubectl.replace_force(
            self.secret_manifest(),
            description=f"Secret/{CLOUDFLARE_SECRET_NAME}",
        )
        self.kubectl.apply(self.issuer_manifest(), description=f"ClusterIssuer for {self.config.domain}")

    def install(self) -> Optional[DnsProvider]:
        """Set up the provider, or do nothing when none is configured.

        Returns:
            The provider that was installed, None when managed DNS is off

        Raises:
            UnsupportedProviderError: for a provider this installer does not know
        """
        provider = self.config.dns_provider
        if provider is DnsProvider.NONE:
            logger.info("Not installing managed DNS")
            return None
        if provider is DnsProvider.CLOUDFLARE:
            self.install_cloudflare()
            return provider
        raise UnsupportedProviderError(str(provider.value))
