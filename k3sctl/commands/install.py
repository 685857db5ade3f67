import logging

import typer

from ..errors import K3sctlError
from ..modules.dependencies import INSTALL_TOOLS, check_dependencies
from ..modules.manifests import METALLB_NAMESPACE
from ..modules.pipeline import build_install_pipeline
from ..modules.runner import CommandRunner, DryRunRunner
from ..modules.summary import render_summary
from ..utils.kube import format_daemonsets, format_nodes, list_daemonsets, list_nodes
from . import exit_with_error, load_or_exit

logger = logging.getLogger("k3sctl.commands.install")


def install_cmd(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Log the commands that would run without running them"),
):
    """Provision k3s on every node and install kube-vip, MetalLB, cert-manager and managed DNS."""
    config = load_or_exit(ctx)

    if dry_run:
        runner = DryRunRunner()
    else:
        try:
            check_dependencies(INSTALL_TOOLS)
        except K3sctlError as e:
            exit_with_error(e)
        runner = CommandRunner()

    logger.info("🚀 Installing Gitpod to k3s cluster")
    pipeline = build_install_pipeline(config, runner)
    try:
        results = pipeline.run()
    except K3sctlError as e:
        logger.error(f"Install stopped at step '{pipeline.failed_step}'")
        exit_with_error(e)

    for result in results:
        detail = f" ({result.detail})" if result.detail else ""
        typer.echo(f"✅ {result.name}{detail}")

    if dry_run:
        typer.echo(f"🧪 Dry run: {len(runner.commands)} command(s) would have been run")
        return

    try:
        typer.echo(format_nodes(list_nodes(config.kubeconfig)))
        typer.echo(format_daemonsets(list_daemonsets(config.kubeconfig, METALLB_NAMESPACE)))
    except K3sctlError as e:
        # the cluster is up at this point, a failed listing only loses the report
        logger.warning(f"⚠️  Could not report cluster state: {e}")

    typer.echo(render_summary(config))
