from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from kubernetes import client, config
from urllib3.exceptions import HTTPError

from ..errors import ClusterAPIError, ConfigurationError


@dataclass
class NodeStatus:
    name: str
    ready: bool
    internal_ip: Optional[str]
    roles: List[str]
    version: str


@dataclass
class DaemonSetStatus:
    name: str
    desired: int
    ready: int
    available: int


def load_kubeconfig(path: Path) -> str:
    """
    Load the kubeconfig k3sup wrote.
    Returns the actual path used to load the kubeconfig.
    """
    resolved = Path(path).expanduser().resolve()
    if not resolved.exists():
        raise ConfigurationError(f"Kubeconfig not found: {resolved}")
    config.load_kube_config(config_file=str(resolved))
    return str(resolved)


def _query(kubeconfig: Path, what: str, call):
    try:
        load_kubeconfig(kubeconfig)
        return call()
    except config.ConfigException as e:
        raise ConfigurationError(f"Invalid kubeconfig: {e}") from e
    except client.ApiException as e:
        raise ClusterAPIError(f"Listing {what} failed: {e.status} {e.reason}") from e
    except HTTPError as e:
        # connection refused, timeouts and TLS errors surface as urllib3 errors
        raise ClusterAPIError(f"Listing {what} failed: API server unreachable ({e})") from e


def _node_status(node) -> NodeStatus:
    conditions = node.status.conditions or []
    ready = any(c.type == "Ready" and c.status == "True" for c in conditions)
    addresses = node.status.addresses or []
    internal_ip = next((a.address for a in addresses if a.type == "InternalIP"), None)
    labels = node.metadata.labels or {}
    roles = sorted(
        key.split("/", 1)[1] for key in labels if key.startswith("node-role.kubernetes.io/")
    )
    return NodeStatus(
        name=node.metadata.name,
        ready=ready,
        internal_ip=internal_ip,
        roles=roles,
        version=node.status.node_info.kubelet_version if node.status.node_info else "",
    )


def list_nodes(kubeconfig: Path) -> List[NodeStatus]:
    """Equivalent of ``kubectl get nodes -o wide`` through the API."""
    nodes = _query(kubeconfig, "nodes", lambda: client.CoreV1Api().list_node().items)
    return [_node_status(node) for node in nodes]


def list_daemonsets(kubeconfig: Path, namespace: str) -> List[DaemonSetStatus]:
    """Equivalent of ``kubectl get ds -n <namespace>``."""
    items = _query(
        kubeconfig,
        f"daemonsets in {namespace}",
        lambda: client.AppsV1Api().list_namespaced_daemon_set(namespace).items,
    )
    return [
        DaemonSetStatus(
            name=ds.metadata.name,
            desired=ds.status.desired_number_scheduled or 0,
            ready=ds.status.number_ready or 0,
            available=ds.status.number_available or 0,
        )
        for ds in items
    ]


def _table(rows) -> str:
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    return "\n".join(
        "   ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip() for row in rows
    )


def format_nodes(nodes: List[NodeStatus]) -> str:
    rows = [("NAME", "STATUS", "ROLES", "VERSION", "INTERNAL-IP")]
    for n in nodes:
        rows.append((
            n.name,
            "Ready" if n.ready else "NotReady",
            ",".join(n.roles) or "<none>",
            n.version,
            n.internal_ip or "<none>",
        ))
    return _table(rows)


def format_daemonsets(daemonsets: List[DaemonSetStatus]) -> str:
    rows = [("NAME", "DESIRED", "READY", "AVAILABLE")]
    for ds in daemonsets:
        rows.append((ds.name, str(ds.desired), str(ds.ready), str(ds.available)))
    return _table(rows)
