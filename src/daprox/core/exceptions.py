"""Exception hierarchy for daprox.

Every exception carries a ``kind`` tag, an HTTP ``status_code`` for the
server layer and an ``exit_code`` for the CLI. Failures raised while a
backend runs a query all derive from QueryError.
"""

from http import HTTPStatus

from daprox.core.exit_codes import ExitCode


class DaproxError(Exception):
    """Base exception for all daprox errors."""

    kind: str = "error"
    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class UnsupportedDatabaseError(DaproxError):
    """No backend is registered for the URI scheme."""

    kind = "unsupported_database"
    status_code = HTTPStatus.BAD_REQUEST
    exit_code = ExitCode.UNSUPPORTED

    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(f"Unsupported database type '{scheme}'")


class QueryError(DaproxError):
    """Statement execution failed; the engine's message is preserved."""

    kind = "query_error"
    status_code = HTTPStatus.BAD_REQUEST
    exit_code = ExitCode.QUERY_ERROR


class UnsupportedSslModeError(QueryError):
    """The URI asked for an sslmode outside the recognized set."""

    kind = "unsupported_ssl_mode"
    exit_code = ExitCode.UNSUPPORTED

    def __init__(self, sslmode: str) -> None:
        self.sslmode = sslmode
        super().__init__(f"Unsupported sslmode '{sslmode}'")


class ConnectionError(QueryError):
    """Connection failures, TLS handshake failures, lost connections."""

    kind = "connection_error"
    status_code = HTTPStatus.BAD_GATEWAY
    exit_code = ExitCode.NETWORK_ERROR


class UnsupportedTypeError(QueryError):
    """A result column has a wire type with no JSON mapping."""

    kind = "unsupported_type"
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    exit_code = ExitCode.UNSUPPORTED

    def __init__(self, column_name: str, type_name: str) -> None:
        self.column_name = column_name
        self.type_name = type_name
        super().__init__(
            f"Could not convert column '{column_name}' to json - "
            f"unsupported column type '{type_name}'"
        )


class InputError(DaproxError):
    """Malformed request parameters, missing query text."""

    kind = "input_error"
    status_code = HTTPStatus.BAD_REQUEST
    exit_code = ExitCode.INPUT_ERROR


class ConfigError(DaproxError):
    """Malformed config file or invalid setting."""

    kind = "config_error"
    exit_code = ExitCode.CONFIG_ERROR
