"""Tests for Sentry setup."""

from unittest.mock import patch

import pytest

from daprox.core.monitoring import setup_sentry


@pytest.mark.unit
@pytest.mark.parametrize("dsn", [None, ""])
def test_disabled_without_dsn(dsn):
    with patch("daprox.core.monitoring.sentry_sdk.init") as init:
        assert setup_sentry(dsn) is False
    init.assert_not_called()


@pytest.mark.unit
def test_enabled_with_dsn():
    with patch("daprox.core.monitoring.sentry_sdk.init") as init:
        assert setup_sentry("https://key@sentry.example.com/1", "production") is True
    kwargs = init.call_args.kwargs
    assert kwargs["dsn"] == "https://key@sentry.example.com/1"
    assert kwargs["environment"] == "production"
    assert kwargs["release"] == "0.1.0"
    assert kwargs["send_default_pii"] is False
