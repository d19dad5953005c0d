"""Command-line interface for turnstream."""

from .app import app

__all__ = ["app"]
