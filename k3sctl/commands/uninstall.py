import logging

import typer

from ..errors import K3sctlError
from ..modules.dependencies import UNINSTALL_TOOLS, check_dependencies
from ..modules.runner import CommandRunner
from ..modules.ssh import RemoteShell
from ..modules.teardown import Teardown, is_affirmative
from . import exit_with_error, load_or_exit

logger = logging.getLogger("k3sctl.commands.uninstall")


def uninstall_cmd(ctx: typer.Context):
    """Run the k3s uninstall script on every node, after confirmation."""
    config = load_or_exit(ctx)
    try:
        check_dependencies(UNINSTALL_TOOLS)
    except K3sctlError as e:
        exit_with_error(e)

    logger.info("Uninstalling Gitpod from k3s cluster")
    typer.echo("Are you sure you want to delete: Gitpod (y/n)?", nl=False)
    reply = typer.getchar()
    typer.echo("")
    if not is_affirmative(reply):
        typer.echo("❌ Deletion cancelled.")
        return

    shell = RemoteShell(CommandRunner(), config.ssh_user, key_path=config.ssh_key, known_hosts=config.known_hosts)
    results = Teardown(config, shell).run()
    for result in results:
        typer.echo(f"{'🧹' if result.success else '⚠️ '} {result.address}")

    if not all(result.success for result in results):
        raise typer.Exit(code=1)
    typer.echo("✅ Cluster deletion complete.")
