"""Shared test fixtures for daprox."""

from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from daprox.cli.main import app
from tests.fakes import fake_connection


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_db():
    """Route backend connections to a fake psycopg connection.

    Call the fixture with columns/rows to install a connection; the
    returned mock is the patched ``connect`` function.
    """
    patchers = []

    def install(columns=None, rows=None, execute_error=None):
        conn = fake_connection(columns, rows, execute_error)
        patcher = patch("daprox.backends.postgres.connect", return_value=conn)
        patchers.append(patcher)
        connect_mock = patcher.start()
        connect_mock.connection = conn
        return connect_mock

    yield install

    for patcher in patchers:
        patcher.stop()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, temp_dir):
    """Keep tests away from the user's config file and DAPROX_* env vars."""
    monkeypatch.setattr(
        "daprox.core.config.DEFAULT_CONFIG_PATH", temp_dir / "missing.toml"
    )
    for var in (
        "DAPROX_LISTEN",
        "DAPROX_SENTRY_DSN",
        "DAPROX_ENVIRONMENT",
        "DAPROX_DB",
    ):
        monkeypatch.delenv(var, raising=False)
