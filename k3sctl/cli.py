import logging
from pathlib import Path

import typer

from k3sctl.commands.install import install_cmd
from k3sctl.commands.status import status_cmd
from k3sctl.commands.uninstall import uninstall_cmd
from k3sctl.config import DEFAULT_ENV_FILE
from k3sctl.logging import setup_logging

app = typer.Typer(add_completion=False)

app.command("install")(install_cmd)
app.command("uninstall")(uninstall_cmd)
app.command("status")(status_cmd)


# Global options callback
@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    env_file: Path = typer.Option(DEFAULT_ENV_FILE, "--env-file", "-e", help="Cluster configuration (dotenv format)"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """k3sctl - provision a k3s cluster ready for Gitpod."""
    setup_logging(debug)
    ctx.obj = {"env_file": env_file, "debug": debug}
    if debug:
        logging.getLogger("k3sctl").debug("Debug mode enabled")

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_usage(), err=True)
        typer.echo("Missing command: expected 'install' or 'uninstall'", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
