"""Cluster configuration loaded from a dotenv file.

The configuration is read once at startup and handed to every component
explicitly. Nothing in k3sctl reads cluster settings from ``os.environ``.
"""
import logging
import re
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator, model_validator

from .errors import ConfigurationError, UnsupportedProviderError
from .modules.models import DnsProvider

logger = logging.getLogger("k3sctl.config")

DEFAULT_ENV_FILE = Path(".env")

REQUIRED_KEYS = ("IP_LIST", "KUBE_VIP", "DOMAIN")


class ClusterConfig(BaseModel):
    """Validated, immutable cluster configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    node_addresses: Tuple[str, ...] = Field(
        description="Node addresses in provisioning order; the first one becomes the initial server"
    )
    server_address: str = Field(description="Virtual IP the control plane is reachable at")
    domain: str = Field(description="Domain Gitpod will be served from")
    ssh_user: str = Field(description="Login used for k3sup and ssh")
    dns_provider: DnsProvider = Field(default=DnsProvider.NONE)
    cloudflare_api_token: Optional[SecretStr] = Field(default=None)
    ssh_key: Optional[Path] = Field(default=None, description="Private key for k3sup and ssh")
    kubeconfig: Path = Field(default=Path("~/.kube/config"), validate_default=True)
    known_hosts: Path = Field(default=Path("~/.ssh/known_hosts"), validate_default=True)
    vip_interface: str = Field(default="eth0", description="Interface kube-vip announces the VIP on")
    lb_addresses: Tuple[str, ...] = Field(
        default=(),
        description="MetalLB layer2 pool; defaults to the server address as a /32",
    )
    acme_email: Optional[str] = Field(default=None)

    @field_validator("node_addresses", "lb_addresses", mode="before")
    @classmethod
    def split_addresses(cls, v):
        if isinstance(v, str):
            # separated by commas and/or whitespace
            return tuple(part for part in re.split(r"[,\s]+", v) if part)
        return tuple(v)

    @field_validator("node_addresses")
    @classmethod
    def require_nodes(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if not v:
            raise ValueError("node address list is empty")
        return v

    @field_validator("server_address", "domain", "ssh_user")
    @classmethod
    def require_value(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("ssh_key", "kubeconfig", "known_hosts")
    @classmethod
    def expand_path(cls, v: Optional[Path]) -> Optional[Path]:
        return v.expanduser() if v is not None else None

    @model_validator(mode="after")
    def check_provider_credentials(self) -> "ClusterConfig":
        if self.dns_provider is DnsProvider.CLOUDFLARE:
            token = self.cloudflare_api_token
            if token is None or not token.get_secret_value().strip():
                raise ValueError("CLOUDFLARE_API_KEY is required when MANAGED_DNS_PROVIDER=cloudflare")
        return self

    @property
    def metallb_addresses(self) -> Tuple[str, ...]:
        return self.lb_addresses or (f"{self.server_address}/32",)

    @property
    def managed_dns(self) -> bool:
        return self.dns_provider is not DnsProvider.NONE


def parse_provider(value: Optional[str]) -> DnsProvider:
    """Map the MANAGED_DNS_PROVIDER setting to a DnsProvider."""
    value = (value or "").strip().lower()
    if not value or value == DnsProvider.NONE.value:
        return DnsProvider.NONE
    try:
        return DnsProvider(value)
    except ValueError:
        raise UnsupportedProviderError(value) from None


def config_from_mapping(values: Dict[str, Optional[str]], source: str = "configuration") -> ClusterConfig:
    """Build a ClusterConfig from raw dotenv key/value pairs."""
    values = {k: (v or "").strip() for k, v in values.items()}

    missing = [key for key in REQUIRED_KEYS if not values.get(key)]
    ssh_user = values.get("SSH_USER") or values.get("USER")
    if not ssh_user:
        missing.append("USER")
    if missing:
        raise ConfigurationError(f"Missing required configuration in {source}: {', '.join(missing)}")

    provider = parse_provider(values.get("MANAGED_DNS_PROVIDER"))

    data: Dict[str, object] = {
        "node_addresses": values["IP_LIST"],
        "server_address": values["KUBE_VIP"],
        "domain": values["DOMAIN"],
        "ssh_user": ssh_user,
        "dns_provider": provider,
    }
    if provider is DnsProvider.CLOUDFLARE:
        data["cloudflare_api_token"] = values.get("CLOUDFLARE_API_KEY", "")

    optional = {
        "SSH_KEY": "ssh_key",
        "KUBECONFIG": "kubeconfig",
        "KNOWN_HOSTS": "known_hosts",
        "VIP_INTERFACE": "vip_interface",
        "METALLB_ADDRESSES": "lb_addresses",
        "ACME_EMAIL": "acme_email",
    }
    for key, field_name in optional.items():
        if values.get(key):
            data[field_name] = values[key]

    try:
        return ClusterConfig(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration in {source}: {problems}") from None


def load_config(path: Union[str, Path] = DEFAULT_ENV_FILE) -> ClusterConfig:
    """Load and validate the cluster configuration from a dotenv file.

    Args:
        path: Location of the dotenv file

    Returns:
        ClusterConfig: the validated configuration

    Raises:
        ConfigurationError: If the file is missing or a value is invalid
        UnsupportedProviderError: If MANAGED_DNS_PROVIDER names an unknown provider
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Missing {path.absolute()} configuration file.")

    logger.debug(f"Loading configuration from {path}")
    config = config_from_mapping(dotenv_values(path), source=str(path))
    logger.debug(
        f"Loaded {len(config.node_addresses)} node(s), VIP {config.server_address}, "
        f"DNS provider {config.dns_provider.value}"
    )
    return config
