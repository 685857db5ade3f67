"""Post-install report for the operator."""
from ..config import ClusterConfig
from .manifests import ISSUER_NAME

GETTING_STARTED_URL = "https://www.gitpod.io/docs/self-hosted/latest/getting-started#step-4-install-gitpod"


def dns_records(config: ClusterConfig):
    """A records Gitpod needs, all pointing at the virtual IP."""
    domain = config.domain
    return [(name, config.server_address) for name in (domain, f"*.{domain}", f"*.ws.{domain}")]


def render_summary(config: ClusterConfig) -> str:
    lines = [
        "",
        "",
        "==========================",
        "Your cloud infrastructure is ready to install Gitpod. Please visit",
        GETTING_STARTED_URL,
        "for your next steps.",
        "",
        "=================",
        "Config Parameters",
        "=================",
        "",
        f"Domain Name: {config.domain}",
        "",
    ]
    for section in ("Registry", "Database", "Storage"):
        lines += [section, "=" * len(section), "In cluster: true", ""]
    lines += [
        "TLS Certificates",
        "================",
        f"Issuer name: {ISSUER_NAME}",
        "Issuer type: Cluster issuer",
    ]
    if config.managed_dns:
        lines += [
            "===========",
            "DNS Records",
            "===========",
            "",
            f"Domain Name: {config.domain}",
            "A Records:",
        ]
        lines += [f"{name} - {address}" for name, address in dns_records(config)]
    return "\n".join(lines) + "\n"
