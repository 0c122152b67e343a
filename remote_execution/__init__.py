"""Remote Execution Layer - Resilient Bunnyshell operations for AI agents.

This package provides:
- Operation Registry: Catalog of REST and CLI operations
- Request Validator: Schema checks before any I/O
- Credential Resolver: Explicit, session and environment tokens
- Transport Adapters: REST API and bns CLI backends
- Retry Orchestrator: Bounded retries with linear backoff
- Response Normalizer: Unified result format
- Execution Orchestrator: End-to-end coordination
"""

from .types import (
    # Enums
    Backend,
    HttpMethod,
    ResultShape,
    ParameterType,
    ParameterLocation,
    CredentialSource,
    ErrorKind,
    TransportErrorKind,
    # Definitions
    ParameterSpec,
    OperationDefinition,
    # Requests
    OperationRequest,
    Credential,
    ResolvedOperation,
    FieldViolation,
    # Outcomes
    HttpOutcome,
    ProcessOutcome,
    RawOutcome,
    # Results
    OperationError,
    OperationResult,
    # Retry
    RetryConfig,
    RetryState,
)

from .exceptions import (
    RemoteExecutionError,
    RequestValidationError,
    TransportError,
    RetryExhaustedError,
)

from .credentials import (
    CredentialResolver,
    get_credential_resolver,
    extract_token_from_message,
    strip_token_from_message,
)
from .operation_registry import OperationRegistry, get_operation_registry
from .validator import RequestValidator
from .retry import RetryOrchestrator, linear_backoff
from .result_normalizer import ResponseNormalizer, get_response_normalizer
from .execution_orchestrator import ExecutionOrchestrator

# Adapters
from .adapters import (
    BaseTransportAdapter,
    BunnyshellApiAdapter,
    BunnyshellCliAdapter,
)

from .schema_generator import OperationSchemaGenerator
from .formatting import format_result

__all__ = [
    # Enums
    "Backend",
    "HttpMethod",
    "ResultShape",
    "ParameterType",
    "ParameterLocation",
    "CredentialSource",
    "ErrorKind",
    "TransportErrorKind",
    # Definitions
    "ParameterSpec",
    "OperationDefinition",
    # Requests
    "OperationRequest",
    "Credential",
    "ResolvedOperation",
    "FieldViolation",
    # Outcomes
    "HttpOutcome",
    "ProcessOutcome",
    "RawOutcome",
    # Results
    "OperationError",
    "OperationResult",
    # Retry
    "RetryConfig",
    "RetryState",
    # Exceptions
    "RemoteExecutionError",
    "RequestValidationError",
    "TransportError",
    "RetryExhaustedError",
    # Core Components
    "CredentialResolver",
    "get_credential_resolver",
    "extract_token_from_message",
    "strip_token_from_message",
    "OperationRegistry",
    "get_operation_registry",
    "RequestValidator",
    "RetryOrchestrator",
    "linear_backoff",
    "ResponseNormalizer",
    "get_response_normalizer",
    "ExecutionOrchestrator",
    # Adapters
    "BaseTransportAdapter",
    "BunnyshellApiAdapter",
    "BunnyshellCliAdapter",
    # Utilities
    "OperationSchemaGenerator",
    "format_result",
]
