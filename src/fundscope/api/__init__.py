"""HTTP API for fundscope."""

from fundscope.api.app import create_app

__all__ = ["create_app"]
