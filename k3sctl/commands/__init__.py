"""CLI commands and the helpers they share."""
import logging
from pathlib import Path

import typer

from ..config import ClusterConfig, load_config
from ..errors import CommandError, K3sctlError

logger = logging.getLogger("k3sctl.commands")


def env_file_from(ctx: typer.Context) -> Path:
    return (ctx.obj or {}).get("env_file", Path(".env"))


def load_or_exit(ctx: typer.Context) -> ClusterConfig:
    """Load the configuration, exiting non-zero before anything else happens."""
    try:
        return load_config(env_file_from(ctx))
    except K3sctlError as e:
        exit_with_error(e)


def exit_with_error(error: K3sctlError) -> None:
    """Log ``error`` with whatever context it carries and exit with status 1."""
    node = getattr(error, "node", None)
    step = getattr(error, "step", None)
    if node:
        logger.error(f"❌ Failed on node {node} during '{step}'")
    logger.error(f"❌ {error}")
    if isinstance(error, CommandError) and error.stdout.strip():
        logger.error(f"Output:\n{error.stdout.strip()}")
    raise typer.Exit(code=1)
