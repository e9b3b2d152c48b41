"""Entry points for turning backend output into bytes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from daprox.core.models import OutputFormat

if TYPE_CHECKING:
    from daprox.formatters.base import Formatter


def get_formatter(output_format: OutputFormat | str) -> Formatter:
    """Return the formatter for an output format."""
    # Import here to trigger registry population from formatter modules.
    import daprox.formatters.columns  # noqa: F401
    import daprox.formatters.json  # noqa: F401
    from daprox.formatters.base import registry

    return registry.get(OutputFormat(output_format))


def encode(output_format: OutputFormat | str, output: Any) -> tuple[bytes, str]:
    """Encode backend output fully; returns (body, content_type)."""
    formatter = get_formatter(output_format)
    return b"".join(formatter.format(output)), formatter.content_type
