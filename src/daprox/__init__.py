"""daprox - HTTP gateway that runs SQL queries and returns JSON."""

from daprox.__about__ import __version__

__all__ = ["__version__"]
