"""Database backends for daprox."""

from daprox.backends.base import BackendRegistry, SqlBackend, registry
from daprox.backends.postgres import PostgresBackend
