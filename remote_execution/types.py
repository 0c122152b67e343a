"""Remote Execution Layer types and data models.

This module defines all Pydantic models for the Remote Execution Layer:
- Operation definitions and parameter specs
- Requests, credentials and resolved operations
- Raw transport outcomes
- Normalized operation results
- Retry configuration and state
"""

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator
from typing import Optional, Dict, List, Any, Union
from enum import Enum


# =============================================================================
# Enums
# =============================================================================

class Backend(str, Enum):
    """Execution backend for an operation."""
    HTTP = "http"
    CLI = "cli"


class HttpMethod(str, Enum):
    """HTTP verbs used by the REST backend."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ResultShape(str, Enum):
    """Declared shape of a successful result payload."""
    LIST = "list"  # {"items": [...]}
    RECORD = "record"
    VOID = "void"
    TEXT = "text"  # raw body, never parsed
    AUTO = "auto"  # JSON when parseable, raw text otherwise


class ParameterType(str, Enum):
    """Type constraints a parameter may declare."""
    STRING = "string"  # non-empty
    TEXT = "text"  # any string, may be empty
    POSITIVE_INTEGER = "positive_integer"
    BOOLEAN = "boolean"
    STRING_MAP = "string_map"
    OBJECT = "object"
    ENUM = "enum"


class ParameterLocation(str, Enum):
    """Where a validated parameter ends up on the wire."""
    PATH = "path"
    QUERY = "query"
    BODY = "body"
    POSITIONAL = "positional"
    FLAG = "flag"
    SWITCH = "switch"


class CredentialSource(str, Enum):
    """Which source a resolved credential came from."""
    EXPLICIT = "explicit"
    SESSION = "session"
    ENVIRONMENT = "environment"


class ErrorKind(str, Enum):
    """Stable error taxonomy of operation results."""
    VALIDATION_ERROR = "ValidationError"
    AUTH_REQUIRED = "AuthRequired"
    TRANSPORT_ERROR = "TransportError"
    API_ERROR = "ApiError"
    EXHAUSTED = "Exhausted"
    INTERNAL_ERROR = "InternalError"


class TransportErrorKind(str, Enum):
    """Sub-kinds of transport failures. All of them are retried."""
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    SPAWN_FAILED = "spawn_failed"
    HTTP_STATUS = "http_status"


# =============================================================================
# Operation Definition Models
# =============================================================================

class ParameterSpec(BaseModel):
    """Declared parameter of an operation."""
    name: str
    type: ParameterType = ParameterType.STRING
    required: bool = False
    default: Optional[Any] = None
    description: str = ""
    location: ParameterLocation = ParameterLocation.FLAG
    key: Optional[str] = None  # query key, body field or CLI flag; defaults to name
    choices: List[str] = Field(default_factory=list)
    embeds_token: bool = False

    @property
    def wire_key(self) -> str:
        return self.key or self.name


class OperationDefinition(BaseModel):
    """Definition of a remote operation in the catalog.

    HTTP operations declare ``method`` and ``path``; CLI operations declare
    ``command``, the subcommand words passed to the binary.
    """
    name: str
    description: str = ""
    backend: Backend
    result: ResultShape = ResultShape.AUTO
    method: Optional[HttpMethod] = None
    path: Optional[str] = None
    command: List[str] = Field(default_factory=list)
    timeout_seconds: Optional[float] = None
    parameters: List[ParameterSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_backend_fields(self) -> "OperationDefinition":
        if self.backend == Backend.HTTP and (self.method is None or not self.path):
            raise ValueError(f"HTTP operation '{self.name}' needs method and path")
        if self.backend == Backend.CLI and not self.command:
            raise ValueError(f"CLI operation '{self.name}' needs a command")
        return self

    def get_parameter(self, name: str) -> Optional[ParameterSpec]:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None


# =============================================================================
# Request & Credential Models
# =============================================================================

class OperationRequest(BaseModel):
    """A single invocation of a named operation. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    name: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    token: Optional[str] = None
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class Credential(BaseModel):
    """Opaque bearer token plus the source it was resolved from."""
    model_config = ConfigDict(frozen=True)

    token: SecretStr
    source: CredentialSource


class ResolvedOperation(BaseModel):
    """Everything a transport adapter needs to perform one attempt."""
    model_config = ConfigDict(frozen=True)

    name: str
    backend: Backend
    credential: Credential
    method: Optional[HttpMethod] = None
    path: Optional[str] = None
    query: Dict[str, Any] = Field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    argv: List[str] = Field(default_factory=list)


class FieldViolation(BaseModel):
    """One violated constraint of a request parameter."""
    model_config = ConfigDict(frozen=True)

    field: str
    message: str


# =============================================================================
# Raw Outcome Models
# =============================================================================

class HttpOutcome(BaseModel):
    """Status and body of a received HTTP response, uninterpreted."""
    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str = ""


class ProcessOutcome(BaseModel):
    """Exit status and captured streams of a finished process, uninterpreted."""
    model_config = ConfigDict(frozen=True)

    exit_code: int
    stdout: str = ""
    stderr: str = ""


RawOutcome = Union[HttpOutcome, ProcessOutcome]


# =============================================================================
# Result Models
# =============================================================================

class OperationError(BaseModel):
    """Structured error payload within an OperationResult."""
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class OperationResult(BaseModel):
    """Uniform result of every operation call.

    ``success`` is true exactly when ``error`` is absent, and ``data`` is only
    ever set on success. ``diagnostics`` carries stderr text written by a
    process that nevertheless succeeded.
    """
    model_config = ConfigDict(frozen=True)

    operation: str
    success: bool
    data: Optional[Any] = None
    error: Optional[OperationError] = None
    diagnostics: Optional[str] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "OperationResult":
        if self.success and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("failed result must carry an error")
        if not self.success and self.data is not None:
            raise ValueError("failed result cannot carry data")
        return self


# =============================================================================
# Retry Models
# =============================================================================

class RetryConfig(BaseModel):
    """Retry ceiling, backoff base and per-attempt deadline."""
    max_retries: int = Field(default=3, ge=0)
    base_delay_seconds: float = Field(default=1.0, ge=0)
    timeout_seconds: float = Field(default=5.0, gt=0)


class RetryState(BaseModel):
    """Attempt counter of one retry loop. Attempt 0 is the first try."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    attempt: int = 0
    last_error: Optional[Exception] = None
