"""Result encoders for daprox."""

from daprox.formatters.base import Formatter, FormatterRegistry, registry
from daprox.formatters.columns import JSONColumnLinesFormatter, JSONColumnsFormatter
from daprox.formatters.encoder import encode, get_formatter
from daprox.formatters.json import JSONFormatter, JSONLinesFormatter
