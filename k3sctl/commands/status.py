import typer

from ..errors import K3sctlError
from ..utils.kube import format_nodes, list_nodes
from . import exit_with_error, load_or_exit


def status_cmd(ctx: typer.Context):
    """Show the cluster nodes through the Kubernetes API."""
    config = load_or_exit(ctx)
    try:
        nodes = list_nodes(config.kubeconfig)
    except K3sctlError as e:
        exit_with_error(e)
    typer.echo(format_nodes(nodes))
