"""Ordered install pipeline.

Each stage of an install is a named step. Steps run strictly in order and
the first failure stops the run; later steps assume earlier ones succeeded.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from ..config import ClusterConfig
from .cert_manager import CertManagerInstaller
from .dns import DnsInstaller
from .helm import Helm
from .kubectl import Kubectl
from .loadbalancer import LoadBalancerInstaller
from .models import StepResult
from .provision import NodeProvisioner
from .runner import CommandRunner
from .ssh import RemoteShell

logger = logging.getLogger("k3sctl.pipeline")


class PipelinePhase(str, Enum):
    """Phases of a pipeline run."""
    NOT_STARTED = 'not_started'
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'


@dataclass
class Step:
    """A named unit of work. ``action`` returns a short detail for the report."""
    name: str
    action: Callable[[], Any]


@dataclass
class Pipeline:
    steps: List[Step] = field(default_factory=list)
    results: List[StepResult] = field(default_factory=list)
    phase: PipelinePhase = PipelinePhase.NOT_STARTED
    failed_step: Optional[str] = None

    def add(self, name: str, action: Callable[[], Any]) -> "Pipeline":
        self.steps.append(Step(name, action))
        return self

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self.steps]

    def run(self) -> List[StepResult]:
        """Run every step in order, stopping at the first exception."""
        self.phase = PipelinePhase.RUNNING
        self.results = []
        for index, step in enumerate(self.steps, start=1):
            logger.info(f"[{index}/{len(self.steps)}] {step.name}")
            start = time.monotonic()
            try:
                detail = step.action()
            except Exception as e:
                duration = time.monotonic() - start
                self.phase = PipelinePhase.FAILED
                self.failed_step = step.name
                self.results.append(StepResult(step.name, False, str(e), duration))
                logger.error(f"Step '{step.name}' failed after {duration:.1f}s")
                raise
            duration = time.monotonic() - start
            self.results.append(StepResult(step.name, True, _describe(detail), duration))
            logger.debug(f"Step '{step.name}' finished in {duration:.1f}s")
        self.phase = PipelinePhase.COMPLETED
        return self.results


def _describe(detail: Any) -> str:
    if detail is None:
        return ''
    if isinstance(detail, (list, tuple)):
        return ', '.join(_describe(item) for item in detail)
    for attr in ('address', 'value', 'name'):
        if hasattr(detail, attr):
            return str(getattr(detail, attr))
    return str(detail)


def build_install_pipeline(config: ClusterConfig, runner: CommandRunner) -> Pipeline:
    """Wire the installers for ``config`` into the install order.

    Nodes come first because everything else talks to their API server.
    """
    shell = RemoteShell(runner, config.ssh_user, key_path=config.ssh_key, known_hosts=config.known_hosts)
    kubectl = Kubectl(runner, kubeconfig=config.kubeconfig)
    helm = Helm(runner, kubeconfig=config.kubeconfig)

    return (
        Pipeline()
        .add("provision-nodes", NodeProvisioner(config, runner, shell, kubectl).provision)
        .add("cert-manager", CertManagerInstaller(config, helm).install)
        .add("managed-dns", DnsInstaller(config, kubectl).install)
        .add("vip-loadbalancer", LoadBalancerInstaller(config, kubectl).install)
    )
