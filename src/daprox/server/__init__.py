"""HTTP surface for daprox."""

from daprox.server.app import create_app

__all__ = ["create_app"]
