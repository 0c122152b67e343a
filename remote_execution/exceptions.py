"""Exceptions raised inside the Remote Execution Layer.

None of these escape ``ExecutionOrchestrator.execute``; each one is turned
into a classified ``OperationResult`` by the Result Normalizer.
"""

from typing import Any, Dict, List, Optional

from .types import FieldViolation, TransportErrorKind


class RemoteExecutionError(Exception):
    """Base class for execution layer errors."""


class RequestValidationError(RemoteExecutionError):
    """Caller-supplied parameters violate the operation's schema."""

    def __init__(self, operation: str, violations: List[FieldViolation]):
        self.operation = operation
        self.violations = violations
        fields = ", ".join(v.field for v in violations)
        super().__init__(f"Invalid parameters for {operation}: {fields}")


class TransportError(RemoteExecutionError):
    """An attempt failed before a usable outcome was received."""

    def __init__(
        self,
        kind: TransportErrorKind,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, **self.details}


class RetryExhaustedError(RemoteExecutionError):
    """Raised when every attempt of a call failed with a transport error."""

    def __init__(self, attempts: int, last_error: TransportError):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Retry exhausted after {attempts} attempts: {last_error}")
