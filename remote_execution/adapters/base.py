"""Base Transport Adapter - Abstract interface for execution backends.

All transport adapters must implement this interface so the retry
orchestrator can drive them without knowing which backend it talks to.
"""

from abc import ABC, abstractmethod
import logging

from ..types import Backend, RawOutcome, ResolvedOperation

logger = logging.getLogger(__name__)


class BaseTransportAdapter(ABC):
    """
    Abstract base class for transport adapters.

    Adapters turn a resolved operation into one remote attempt.

    Responsibilities:
    - Request / command construction
    - Credential injection
    - Deadline enforcement with cancellation

    Constraints:
    - No interpretation of the outcome (handled by Result Normalizer)
    - No retries (handled by Retry Orchestrator)
    """

    def __init__(self):
        self.name: str = "base"
        self.backend: Backend = Backend.HTTP
        self._initialized: bool = False

    async def initialize(self) -> None:
        """
        Initialize the adapter.

        Override this to perform async initialization
        (client setup, binary lookup, etc).
        """
        self._initialized = True
        logger.info(f"Adapter {self.name} initialized")

    @abstractmethod
    async def execute(
        self,
        operation: ResolvedOperation,
        timeout_seconds: float,
    ) -> RawOutcome:
        """
        Perform one attempt of an operation.

        Args:
            operation: Operation with its credential already resolved
            timeout_seconds: Deadline for this attempt

        Returns:
            The raw outcome, uninterpreted

        Raises:
            TransportError: The attempt produced no usable outcome
        """
        pass

    def supports(self, operation: ResolvedOperation) -> bool:
        """Check if this adapter can run an operation."""
        return operation.backend == self.backend

    def is_initialized(self) -> bool:
        """Check if adapter is initialized."""
        return self._initialized

    async def shutdown(self) -> None:
        """
        Graceful shutdown of the adapter.

        Override to clean up resources, close connections, etc.
        """
        self._initialized = False
        logger.info(f"Adapter {self.name} shut down")
