"""Result Normalizer - Unified response formatting.

Converts heterogeneous raw outcomes (HTTP responses, process output) and
short-circuit failures into one OperationResult shape.
"""

import json
import logging
from typing import Any, List, Optional

from .exceptions import RetryExhaustedError
from .types import (
    ErrorKind,
    FieldViolation,
    HttpOutcome,
    OperationDefinition,
    OperationError,
    OperationResult,
    ProcessOutcome,
    RawOutcome,
    ResultShape,
)

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"

_NOT_JSON = object()


def _parse_json(text: str) -> Any:
    """Parsed JSON value, or the ``_NOT_JSON`` marker."""
    if not text or not text.strip():
        return _NOT_JSON
    try:
        return json.loads(text)
    except ValueError:
        return _NOT_JSON


class ResponseNormalizer:
    """
    Normalize raw outcomes to the OperationResult contract.

    Every method is a pure function of its arguments: normalizing the
    same outcome twice gives equal results.

    Output Format:
    - success: bool
    - data: payload on success only
    - error: kind, message, details on failure only
    - diagnostics: stderr of a successful process
    """

    def normalize(
        self,
        outcome: RawOutcome,
        definition: OperationDefinition,
    ) -> OperationResult:
        """
        Convert a raw outcome into an OperationResult.

        Args:
            outcome: HTTP or process outcome of the successful attempt
            definition: Operation the outcome belongs to

        Returns:
            Normalized OperationResult
        """
        if isinstance(outcome, HttpOutcome):
            return self._normalize_http(outcome, definition)
        if isinstance(outcome, ProcessOutcome):
            return self._normalize_process(outcome, definition)
        raise TypeError(f"Unsupported outcome type: {type(outcome).__name__}")

    def _normalize_http(
        self,
        outcome: HttpOutcome,
        definition: OperationDefinition,
    ) -> OperationResult:
        parsed = _parse_json(outcome.body)

        if 200 <= outcome.status_code < 300:
            return OperationResult(
                operation=definition.name,
                success=True,
                data=self._shape_payload(parsed, outcome.body, definition.result),
            )

        message = UNKNOWN_ERROR
        if isinstance(parsed, dict):
            candidate = parsed.get("message")
            if isinstance(candidate, str) and candidate:
                message = candidate

        details = {"status_code": outcome.status_code, "body": outcome.body}
        if parsed is not _NOT_JSON:
            details["parsed"] = parsed

        return self._failure(definition.name, ErrorKind.API_ERROR, message, details)

    def _shape_payload(self, parsed: Any, raw: str, shape: ResultShape) -> Any:
        if shape == ResultShape.VOID:
            return None
        if shape == ResultShape.TEXT:
            return raw if raw else None
        if parsed is _NOT_JSON:
            return raw if raw else None
        if shape == ResultShape.LIST and isinstance(parsed, list):
            return {"items": parsed}
        return parsed

    def _normalize_process(
        self,
        outcome: ProcessOutcome,
        definition: OperationDefinition,
    ) -> OperationResult:
        if outcome.exit_code != 0:
            message = (
                outcome.stderr.strip()
                or outcome.stdout.strip()
                or f"Command exited with status {outcome.exit_code}"
            )
            return self._failure(
                definition.name,
                ErrorKind.API_ERROR,
                message,
                {
                    "exit_code": outcome.exit_code,
                    "stdout": outcome.stdout,
                    "stderr": outcome.stderr,
                },
            )

        parsed = _parse_json(outcome.stdout)
        return OperationResult(
            operation=definition.name,
            success=True,
            data=self._shape_payload(parsed, outcome.stdout, definition.result),
            diagnostics=outcome.stderr or None,
        )

    def _failure(
        self,
        operation: str,
        kind: ErrorKind,
        message: str,
        details: Optional[dict] = None,
    ) -> OperationResult:
        return OperationResult(
            operation=operation,
            success=False,
            error=OperationError(kind=kind, message=message, details=details or {}),
        )

    def auth_required(self, operation: str, env_var: str) -> OperationResult:
        """
        Create the result for a call with no resolvable token.

        Args:
            operation: Name of the operation
            env_var: Environment variable that could have supplied a token

        Returns:
            OperationResult with AuthRequired error
        """
        return self._failure(
            operation,
            ErrorKind.AUTH_REQUIRED,
            "Bunnyshell API token is required but not provided. Please provide a token.",
            {"env_var": env_var},
        )

    def validation_failed(
        self,
        operation: str,
        violations: List[FieldViolation],
    ) -> OperationResult:
        """Create the result for rejected parameters, listing every violation."""
        return self._failure(
            operation,
            ErrorKind.VALIDATION_ERROR,
            f"Invalid parameters for {operation}",
            {"violations": [v.model_dump() for v in violations]},
        )

    def exhausted(self, operation: str, error: RetryExhaustedError) -> OperationResult:
        """
        Create the result for a call whose retries all failed.

        The last transport error's message is surfaced unchanged.
        """
        return self._failure(
            operation,
            ErrorKind.EXHAUSTED,
            error.last_error.message,
            {
                "attempts": error.attempts,
                "transport_error": error.last_error.to_dict(),
            },
        )

    def internal_error(self, operation: str, exc: Exception) -> OperationResult:
        """Create the result for an unexpected failure inside this layer."""
        return self._failure(
            operation,
            ErrorKind.INTERNAL_ERROR,
            str(exc) or type(exc).__name__,
            {"exception": type(exc).__name__},
        )


# Singleton instance
_normalizer: Optional[ResponseNormalizer] = None


def get_response_normalizer() -> ResponseNormalizer:
    """Get or create the response normalizer singleton."""
    global _normalizer
    if _normalizer is None:
        _normalizer = ResponseNormalizer()
    return _normalizer
