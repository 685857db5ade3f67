"""Utility helpers for k3sctl."""
