"""Render operation results as Markdown text for the assistant."""

import json
from typing import Any

from .types import ErrorKind, OperationResult


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


def format_result(result: OperationResult) -> str:
    """
    Format an OperationResult into readable text.

    AuthRequired becomes a prompt for a token, ValidationError a
    field-by-field list, other errors a diagnostic block. Successful
    results show their output and any diagnostics the command printed.
    """
    error = result.error

    if error is not None and error.kind == ErrorKind.AUTH_REQUIRED:
        return (
            "### Authentication Required\n"
            "A Bunnyshell API token is required to execute this command.\n\n"
            "Please provide your API token using the format:\n"
            "```\ntoken: YOUR_API_TOKEN_HERE\n```\n"
        )

    if error is not None and error.kind == ErrorKind.VALIDATION_ERROR:
        lines = [f"### Invalid Parameters for `{result.operation}`"]
        for violation in error.details.get("violations", []):
            lines.append(f"- `{violation['field']}`: {violation['message']}")
        return "\n".join(lines) + "\n"

    if error is not None:
        output = f"### Error ({error.kind.value})\n{error.message}\n\n"
        if error.details:
            output += f"```json\n{_pretty(error.details)}\n```\n\n"
        output += f"Operation: `{result.operation}`"
        return output

    output = ""
    if isinstance(result.data, str):
        output += f"### Command Output\n```\n{result.data}\n```\n\n"
    elif result.data is not None:
        output += f"### Command Output\n```json\n{_pretty(result.data)}\n```\n\n"

    if result.diagnostics:
        output += f"### Errors\n```\n{result.diagnostics}\n```\n\n"

    if result.data is None and not result.diagnostics:
        output += "No output returned from the command.\n\n"

    output += f"Operation: `{result.operation}`"
    return output
