"""Exception hierarchy for k3sctl."""
from typing import List, Optional


class K3sctlError(Exception):
    """Base class for every error k3sctl raises on purpose."""


class ConfigurationError(K3sctlError):
    """The configuration source is missing or invalid."""


class UnsupportedProviderError(ConfigurationError):
    """A managed DNS provider was requested that k3sctl cannot set up."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"Unsupported managed DNS provider '{provider}'. "
            "Supported providers: cloudflare (or leave MANAGED_DNS_PROVIDER empty)"
        )


class MissingDependencyError(K3sctlError):
    """A required executable is not on PATH."""

    def __init__(self, tool: str, hint: str):
        self.tool = tool
        self.hint = hint
        super().__init__(f"{tool} not be found - {hint}")


class CommandError(K3sctlError):
    """An external command exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        cmd: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        self.cmd = cmd or []
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.returncode is not None:
            msg += f" (exit code: {self.returncode})"
        if self.stderr.strip():
            msg += f"\n{self.stderr.strip()}"
        return msg

    @classmethod
    def from_error(cls, message: str, error: "CommandError", **kwargs):
        """Re-wrap a lower level command failure, keeping its diagnostics."""
        return cls(
            message,
            cmd=error.cmd,
            returncode=error.returncode,
            stdout=error.stdout,
            stderr=error.stderr,
            **kwargs,
        )


class RemoteExecutionError(CommandError):
    """A cluster install/join or ssh command failed on a node."""

    def __init__(self, message: str, node: Optional[str] = None, step: Optional[str] = None, **kwargs):
        self.node = node
        self.step = step
        super().__init__(message, **kwargs)


class ManifestApplyError(CommandError):
    """kubectl could not apply or replace a manifest."""


class ChartInstallError(CommandError):
    """helm upgrade --install failed (helm rolls back on its own)."""


class ClusterAPIError(K3sctlError):
    """The Kubernetes API rejected a request."""
