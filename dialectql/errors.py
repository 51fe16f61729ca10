"""Custom exception hierarchy for dialectQL.

All public errors inherit from DialectQLError so callers can catch the base
class for any dialectQL-specific failure.

Translation-time errors (``ConfigurationError``, ``CapabilityError`` and
``UnsupportedDDLError``) are raised before any SQL reaches a backend.
``ExecutionError`` is only raised by the connection layer and wraps the
driver exception unchanged.
"""
from __future__ import annotations

from typing import Any


class DialectQLError(Exception):
    """Base exception for all dialectQL errors.

    Args:
        message: Human-readable description.
        code: Machine-readable error code.
        details: Extra context for diagnostics.
    """

    code = "DIALECTQL_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for logging."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details,
        }


class ConfigurationError(DialectQLError):
    """Raised for programmer errors: unknown operators, value kinds or dialects.

    Args:
        message: Human-readable description.
        dialect: Name of the active dialect, when known.
    """

    def __init__(self, message: str, dialect: str | None = None) -> None:
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details={"dialect": dialect},
        )
        self.dialect = dialect


class CapabilityError(DialectQLError):
    """Raised when a well-formed IR node needs a feature the dialect lacks.

    Args:
        message: Human-readable description.
        feature: Name of the unsupported feature (e.g. ``"IS TRUE"``).
        dialect: Name of the active dialect.
    """

    def __init__(self, message: str, feature: str, dialect: str) -> None:
        super().__init__(
            message,
            code="CAPABILITY_ERROR",
            details={"feature": feature, "dialect": dialect},
        )
        self.feature = feature
        self.dialect = dialect


class UnsupportedDDLError(CapabilityError):
    """Raised when a backend structurally cannot perform an ALTER TABLE kind."""

    def __init__(self, kind: str, dialect: str) -> None:
        super().__init__(
            f"ALTER TABLE operation '{kind}' is not supported by dialect '{dialect}'.",
            feature=kind,
            dialect=dialect,
        )
        self.code = "UNSUPPORTED_DDL"
        self.kind = kind


class ExecutionError(DialectQLError):
    """Raised when the backend rejects rendered SQL.

    The driver exception is chained as ``__cause__`` and is never
    reinterpreted.

    Args:
        message: Human-readable description (usually the driver message).
        sql: The rendered statement that failed.
        params: Bound parameters sent with the statement.
    """

    def __init__(
        self,
        message: str,
        sql: str,
        params: tuple[Any, ...] | list[Any] | None = None,
    ) -> None:
        super().__init__(
            f"{message} [SQL: {sql}]",
            code="EXECUTION_ERROR",
            details={"sql": sql, "params": list(params or ())},
        )
        self.sql = sql
        self.params = tuple(params or ())
