"""
Error hierarchy raised while compiling statement descriptors.
"""

from __future__ import annotations


class QueryBuilderError(ValueError):
    """
    Descriptor contract violation detected at compile time.

    The optional context (clause, query, parameter counts, hint) is rendered
    into the message so that a failing descriptor can be located quickly.
    """

    def __init__(
        self,
        message: str,
        *,
        clause: str | None = None,
        query: str | None = None,
        expected_params: int | None = None,
        received_params: int | None = None,
        hint: str | None = None,
    ) -> None:
        self.clause = clause
        self.query = query
        self.expected_params = expected_params
        self.received_params = received_params
        self.hint = hint
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        segments = [message]
        if self.clause:
            segments.append(f"clause: {self.clause}")
        if self.query:
            segments.append(f"query: {self.query}")
        if self.expected_params is not None:
            segments.append(f"expected: {self.expected_params} parameter(s)")
        if self.received_params is not None:
            segments.append(f"received: {self.received_params} parameter(s)")
        if self.hint:
            segments.append(f"hint: {self.hint}")
        return "; ".join(segments)


class ParameterMismatchError(QueryBuilderError):
    """Raised when placeholders and bound values disagree in count."""

    def __init__(
        self,
        *,
        clause: str,
        expected_params: int,
        received_params: int,
        query: str | None = None,
    ) -> None:
        if received_params > expected_params:
            hint = "Remove extra parameters or add more placeholders (?) to the condition"
        else:
            hint = "Add missing parameters or remove extra placeholders (?) from the condition"
        super().__init__(
            "Parameter count mismatch",
            clause=clause,
            query=query,
            expected_params=expected_params,
            received_params=received_params,
            hint=hint,
        )


class MissingDataError(QueryBuilderError):
    """Raised when a required descriptor field is absent or empty."""

    def __init__(self, operation: str, field: str) -> None:
        self.operation = operation
        self.field = field
        super().__init__(
            f"{field} is required for {operation} operation",
            hint=f"Provide a valid {field}",
        )


class InvalidConfigurationError(QueryBuilderError):
    """Raised when a descriptor has a malformed shape."""

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)


__all__ = [
    "QueryBuilderError",
    "ParameterMismatchError",
    "MissingDataError",
    "InvalidConfigurationError",
]
