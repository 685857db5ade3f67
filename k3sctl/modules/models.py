"""Data models for cluster provisioning."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class NodeRole(str, Enum):
    """Roles a node plays in the k3s cluster."""
    SERVER = 'server'
    JOINER = 'joiner'


class DnsProvider(str, Enum):
    """Managed DNS integrations cert-manager can be wired to."""
    NONE = 'none'
    CLOUDFLARE = 'cloudflare'


@dataclass(frozen=True)
class NodeAssignment:
    """A node address paired with the role derived from its position."""
    address: str
    role: NodeRole
    index: int


@dataclass
class ProvisioningResult:
    """Outcome of provisioning a single node."""
    address: str
    role: NodeRole
    success: bool
    message: str = ''
    steps: List[str] = field(default_factory=list)


@dataclass
class StepResult:
    """Outcome of one named step of the install pipeline."""
    name: str
    success: bool
    detail: str = ''
    duration: float = 0.0


@dataclass
class TeardownResult:
    """Outcome of running the k3s uninstall script on a node."""
    address: str
    success: bool
    message: Optional[str] = None
