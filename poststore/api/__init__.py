"""HTTP surface for the post store."""

from .server import create_app

__all__ = ["create_app"]
