"""Execution Orchestrator - Runs one remote operation end to end.

The main entry point of the Remote Execution Layer. It coordinates all
components so that every call ends in a classified OperationResult.
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from pydantic import ValidationError

from .adapters.base import BaseTransportAdapter
from .adapters.cli import BunnyshellCliAdapter
from .adapters.http_api import BunnyshellApiAdapter
from .credentials import (
    CredentialResolver,
    extract_token_from_message,
    get_credential_resolver,
    strip_token_from_message,
)
from .exceptions import RequestValidationError, RetryExhaustedError
from .operation_registry import OperationRegistry, get_operation_registry
from .result_normalizer import ResponseNormalizer, get_response_normalizer
from .retry import RetryOrchestrator, SleepFunc
from .types import (
    Backend,
    Credential,
    OperationDefinition,
    OperationRequest,
    OperationResult,
    ParameterLocation,
    ResolvedOperation,
    RetryConfig,
)
from .validator import RequestValidator, violations_from_error

logger = logging.getLogger(__name__)


class ExecutionOrchestrator:
    """
    Coordinates execution of a single remote operation.

    Execution flow:
    1. Look the operation up in the registry
    2. Validate parameters (no side effects on failure)
    3. Resolve the credential
    4. Build the backend-specific operation
    5. Execute with retries
    6. Normalize the outcome

    This layer does NOT:
    - Cache remote state
    - Batch or parallelize calls
    - Persist credentials
    """

    def __init__(
        self,
        registry: Optional[OperationRegistry] = None,
        resolver: Optional[CredentialResolver] = None,
        adapters: Optional[Dict[Backend, BaseTransportAdapter]] = None,
        retry_config: Optional[RetryConfig] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        self._initialized: bool = False
        self._registry = registry
        self._resolver = resolver or get_credential_resolver()
        self._validator = RequestValidator()
        self._normalizer: ResponseNormalizer = get_response_normalizer()
        self._retry = RetryOrchestrator(retry_config, sleep=sleep)

        # Adapters by backend
        self._adapters: Dict[Backend, BaseTransportAdapter] = adapters or {
            Backend.HTTP: BunnyshellApiAdapter(),
            Backend.CLI: BunnyshellCliAdapter(),
        }

    async def initialize(self) -> None:
        """Initialize the orchestrator and its adapters."""
        logger.info("Initializing Execution Orchestrator...")

        if self._registry is None:
            self._registry = get_operation_registry()
        elif self._registry.operation_count == 0:
            self._registry.load()

        for adapter in self._adapters.values():
            await adapter.initialize()

        self._initialized = True
        logger.info(
            f"Execution Orchestrator initialized with "
            f"{self._registry.operation_count} operations"
        )

    async def invoke(
        self,
        name: str,
        parameters: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> OperationResult:
        """
        Invoke an operation by name.

        Args:
            name: Operation name from the registry
            parameters: Operation parameters
            token: Explicit API token for this call
            timeout_seconds: Per-attempt deadline override

        Returns:
            OperationResult, never raises for operation failures
        """
        try:
            request = OperationRequest(
                name=name,
                parameters=parameters or {},
                token=token,
                timeout_seconds=timeout_seconds,
            )
        except ValidationError as e:
            return self._normalizer.validation_failed(name, violations_from_error(e))

        return await self.execute(request)

    async def execute(self, request: OperationRequest) -> OperationResult:
        """
        Execute one operation request.

        Args:
            request: Operation request to run

        Returns:
            OperationResult classified as success or one error kind
        """
        name = request.name
        logger.info(f"Executing operation {name}")

        try:
            if not self._initialized:
                await self.initialize()

            # 1. Look up
            definition = self._registry.get(name)
            if definition is None:
                raise self._validator.unknown_operation(name)

            # 2. Validate
            params = self._validator.validate(definition, request.parameters)
            params, inline_token = self._extract_inline_token(definition, params)

            # 3. Resolve credential
            credential = self._resolver.resolve(request.token or inline_token)
            if credential is None:
                return self._normalizer.auth_required(name, self._resolver.env_var)

            # 4. Build
            operation = self.build_operation(definition, params, credential)
            adapter = self._adapters.get(definition.backend)
            if adapter is None:
                raise RuntimeError(f"No adapter for backend: {definition.backend.value}")

            # 5. Execute with retries
            timeout = request.timeout_seconds or definition.timeout_seconds
            outcome = await self._retry.run(adapter, operation, timeout)

            # 6. Normalize
            result = self._normalizer.normalize(outcome, definition)

        except RequestValidationError as e:
            return self._normalizer.validation_failed(name, e.violations)
        except RetryExhaustedError as e:
            return self._normalizer.exhausted(name, e)
        except Exception as e:
            logger.exception(f"Operation {name} failed unexpectedly: {e}")
            return self._normalizer.internal_error(name, e)

        if result.success:
            logger.info(f"Operation {name} completed")
        else:
            logger.warning(f"Operation {name} failed: {result.error.message}")
        return result

    def _extract_inline_token(
        self,
        definition: OperationDefinition,
        params: Dict[str, Any],
    ) -> Tuple[Dict[str, Any], Optional[str]]:
        """Pull ``token: XYZ`` fragments out of token-carrying parameters."""
        token: Optional[str] = None
        cleaned = dict(params)
        for spec in definition.parameters:
            value = cleaned.get(spec.name)
            if not spec.embeds_token or not isinstance(value, str):
                continue
            found = extract_token_from_message(value)
            if found is None:
                continue
            token = token or found
            remainder = strip_token_from_message(value)
            if remainder:
                cleaned[spec.name] = remainder
            else:
                del cleaned[spec.name]
        return cleaned, token

    def build_operation(
        self,
        definition: OperationDefinition,
        params: Dict[str, Any],
        credential: Credential,
    ) -> ResolvedOperation:
        """
        Turn validated parameters into a backend-specific operation.

        HTTP parameters are split into path, query and JSON body. CLI
        parameters become the argv after the subcommand: positionals
        first, then flags and switches in declaration order.
        """
        if definition.backend == Backend.HTTP:
            path_values: Dict[str, str] = {}
            query: Dict[str, Any] = {}
            body: Dict[str, Any] = {}
            for spec in definition.parameters:
                if spec.name not in params:
                    continue
                value = params[spec.name]
                if spec.location == ParameterLocation.PATH:
                    path_values[spec.name] = quote(str(value), safe="")
                elif spec.location == ParameterLocation.QUERY:
                    query[spec.wire_key] = value
                else:
                    body[spec.wire_key] = value

            return ResolvedOperation(
                name=definition.name,
                backend=definition.backend,
                credential=credential,
                method=definition.method,
                path=definition.path.format(**path_values),
                query=query,
                body=body or None,
            )

        positionals = []
        options = []
        for spec in definition.parameters:
            if spec.name not in params:
                continue
            value = params[spec.name]
            if spec.location == ParameterLocation.POSITIONAL:
                positionals.append(str(value))
            elif spec.location == ParameterLocation.SWITCH:
                if value:
                    options.append(f"--{spec.wire_key}")
            else:
                options.extend([f"--{spec.wire_key}", _cli_value(value)])

        return ResolvedOperation(
            name=definition.name,
            backend=definition.backend,
            credential=credential,
            argv=[*definition.command, *positionals, *options],
        )

    def set_session_token(self, token: str) -> None:
        """Make ``token`` the default for later calls in this process."""
        self._resolver.set_session_token(token)

    @property
    def registry(self) -> Optional[OperationRegistry]:
        return self._registry

    @property
    def is_initialized(self) -> bool:
        """Check if orchestrator is initialized."""
        return self._initialized

    async def shutdown(self) -> None:
        """Shut down all adapters."""
        for adapter in self._adapters.values():
            await adapter.shutdown()
        self._initialized = False
        logger.info("Execution Orchestrator shut down")


def _cli_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)
