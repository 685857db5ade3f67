"""Kubernetes manifests rendered from typed parameters.

Manifests are built as dictionaries and serialized with PyYAML, so values
from the configuration are never interpolated into YAML text.
"""
import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import yaml

KUBE_VIP_VERSION = "v0.4.4"
KUBE_VIP_IMAGE = f"ghcr.io/kube-vip/kube-vip:{KUBE_VIP_VERSION}"
KUBE_VIP_RBAC_URL = "https://kube-vip.io/manifests/rbac.yaml"

METALLB_VERSION = "v0.12.1"
METALLB_NAMESPACE = "metallb-system"
METALLB_MANIFEST_URLS = [
    f"https://raw.githubusercontent.com/metallb/metallb/{METALLB_VERSION}/manifests/namespace.yaml",
    f"https://raw.githubusercontent.com/metallb/metallb/{METALLB_VERSION}/manifests/metallb.yaml",
]

CERT_MANAGER_NAMESPACE = "cert-manager"
CLOUDFLARE_SECRET_NAME = "cloudflare-api-token"
CLOUDFLARE_SECRET_KEY = "api-token"
ISSUER_NAME = "gitpod-issuer"
LETSENCRYPT_SERVER = "https://acme-v02.api.letsencrypt.org/directory"


@dataclass(frozen=True)
class KubeVipParams:
    address: str
    interface: str = "eth0"
    image: str = KUBE_VIP_IMAGE
    namespace: str = "kube-system"
    port: int = 6443


@dataclass(frozen=True)
class MetalLBParams:
    addresses: Sequence[str]
    pool_name: str = "default"
    namespace: str = METALLB_NAMESPACE


@dataclass(frozen=True)
class SecretParams:
    name: str
    namespace: str
    literals: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ClusterIssuerParams:
    domain: str
    name: str = ISSUER_NAME
    email: Optional[str] = None
    server: str = LETSENCRYPT_SERVER
    secret_name: str = CLOUDFLARE_SECRET_NAME
    secret_key: str = CLOUDFLARE_SECRET_KEY


def to_yaml(*docs: Dict[str, Any]) -> str:
    """Serialize one or more manifests as a multi-document YAML stream."""
    return yaml.safe_dump_all(list(docs), default_flow_style=False, sort_keys=False)


def _env(name: str, value: Any) -> Dict[str, str]:
    return {"name": name, "value": str(value)}


def kube_vip_daemonset(params: KubeVipParams) -> Dict[str, Any]:
    """kube-vip DaemonSet announcing the control-plane VIP over ARP."""
    control_plane_terms = [
        {"matchExpressions": [{"key": f"node-role.kubernetes.io/{role}", "operator": "Exists"}]}
        for role in ("master", "control-plane")
    ]
    env = [
        _env("vip_arp", "true"),
        _env("port", params.port),
        _env("vip_interface", params.interface),
        _env("vip_cidr", "32"),
        _env("cp_enable", "true"),
        _env("cp_namespace", params.namespace),
        _env("vip_ddns", "false"),
        _env("svc_enable", "false"),
        _env("vip_leaderelection", "true"),
        _env("vip_leaseduration", "5"),
        _env("vip_renewdeadline", "3"),
        _env("vip_retryperiod", "1"),
        _env("address", params.address),
    ]
    return {
        "apiVersion": "apps/v1",
        "kind": "DaemonSet",
        "metadata": {
            "name": "kube-vip-ds",
            "namespace": params.namespace,
            "labels": {"app.kubernetes.io/name": "kube-vip-ds"},
        },
        "spec": {
            "selector": {"matchLabels": {"name": "kube-vip-ds"}},
            "template": {
                "metadata": {"labels": {"name": "kube-vip-ds"}},
                "spec": {
                    "affinity": {
                        "nodeAffinity": {
                            "requiredDuringSchedulingIgnoredDuringExecution": {
                                "nodeSelectorTerms": control_plane_terms,
                            }
                        }
                    },
                    "containers": [
                        {
                            "name": "kube-vip",
                            "image": params.image,
                            "imagePullPolicy": "IfNotPresent",
                            "args": ["manager"],
                            "env": env,
                            "securityContext": {
                                "capabilities": {"add": ["NET_ADMIN", "NET_RAW", "SYS_TIME"]}
                            },
                        }
                    ],
                    "hostNetwork": True,
                    "serviceAccountName": "kube-vip",
                    "tolerations": [
                        {"effect": "NoSchedule", "operator": "Exists"},
                        {"effect": "NoExecute", "operator": "Exists"},
                    ],
                },
            },
        },
    }


def metallb_config(params: MetalLBParams) -> Dict[str, Any]:
    """MetalLB (ConfigMap era) layer2 address pool."""
    if not params.addresses:
        raise ValueError("MetalLB address pool is empty")
    pools = {
        "address-pools": [
            {
                "name": params.pool_name,
                "protocol": "layer2",
                "addresses": list(params.addresses),
            }
        ]
    }
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"namespace": params.namespace, "name": "config"},
        "data": {"config": yaml.safe_dump(pools, default_flow_style=False, sort_keys=False)},
    }


def opaque_secret(params: SecretParams) -> Dict[str, Any]:
    """Opaque Secret, shaped like ``kubectl create secret generic --dry-run=client -o yaml``."""
    data = {
        key: base64.b64encode(value.encode("utf-8")).decode("ascii")
        for key, value in params.literals.items()
    }
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": params.name, "namespace": params.namespace},
        "type": "Opaque",
        "data": data,
    }


def cloudflare_cluster_issuer(params: ClusterIssuerParams) -> Dict[str, Any]:
    """Let's Encrypt ClusterIssuer solving DNS-01 challenges through Cloudflare."""
    acme: Dict[str, Any] = {
        "server": params.server,
        "privateKeySecretRef": {"name": f"{params.name}-account-key"},
        "solvers": [
            {
                "dns01": {
                    "cloudflare": {
                        "apiTokenSecretRef": {"name": params.secret_name, "key": params.secret_key},
                    }
                },
                "selector": {"dnsZones": [params.domain]},
            }
        ],
    }
    if params.email:
        acme["email"] = params.email
    return {
        "apiVersion": "cert-manager.io/v1",
        "kind": "ClusterIssuer",
        "metadata": {"name": params.name},
        "spec": {"acme": acme},
    }


def manifest_names(text: str) -> List[str]:
    """Return ``Kind/name`` for each document in a YAML stream."""
    names = []
    for doc in yaml.safe_load_all(text):
        if not doc or not doc.get("kind"):
            continue
        names.append(f"{doc['kind']}/{doc.get('metadata', {}).get('name', '')}")
    return names
