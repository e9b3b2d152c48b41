"""Standard exit codes for the daprox CLI.

Exit codes follow Unix conventions.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for daprox commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    QUERY_ERROR = 4
    NETWORK_ERROR = 5
    UNSUPPORTED = 6
    CONFIG_ERROR = 7
