"""k3sctl - k3s cluster bootstrap for self-hosted Gitpod."""

__version__ = "0.1.0"
