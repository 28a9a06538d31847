"""HTTP API for the portfolio backend."""

from .app import create_app

__all__ = ["create_app"]
