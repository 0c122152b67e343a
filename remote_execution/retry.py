"""Retry Orchestrator - Re-runs transport attempts with linear backoff."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .adapters.base import BaseTransportAdapter
from .exceptions import RetryExhaustedError, TransportError
from .types import RawOutcome, ResolvedOperation, RetryConfig, RetryState

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def linear_backoff(attempt: int, base: float) -> float:
    """
    Delay before retry number ``attempt``.

    ``delay = base * attempt`` with attempts numbered from 1. The first try
    (attempt 0) never waits, so asking for it is an error.
    """
    if attempt < 1:
        raise ValueError(f"Backoff is only defined for retries (attempt >= 1), got {attempt}")
    return base * attempt


class RetryOrchestrator:
    """
    Wrap a transport adapter with bounded retries.

    Every TransportError counts as transient, whatever its kind. Attempts
    run strictly one after another; between them the orchestrator sleeps
    for ``linear_backoff(attempt, base_delay)``. After ``max_retries``
    retries the last error is raised inside a RetryExhaustedError.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep or asyncio.sleep

    async def run(
        self,
        adapter: BaseTransportAdapter,
        operation: ResolvedOperation,
        timeout_seconds: Optional[float] = None,
    ) -> RawOutcome:
        """
        Execute ``operation`` until it yields an outcome or retries run out.

        Args:
            adapter: Backend performing each attempt
            operation: Fully resolved operation
            timeout_seconds: Per-attempt deadline; defaults to the config

        Returns:
            The first RawOutcome any attempt produced

        Raises:
            RetryExhaustedError: All ``max_retries + 1`` attempts failed
        """
        deadline = timeout_seconds or self.config.timeout_seconds
        state = RetryState()

        while True:
            try:
                outcome = await adapter.execute(operation, deadline)
                if state.attempt > 0:
                    logger.info(
                        f"{operation.name} succeeded on attempt {state.attempt + 1}"
                    )
                return outcome
            except TransportError as e:
                state.last_error = e
                logger.warning(
                    f"{operation.name} attempt {state.attempt + 1} failed "
                    f"({e.kind.value}): {e.message}"
                )

            if state.attempt >= self.config.max_retries:
                logger.error(
                    f"{operation.name} giving up after {state.attempt + 1} attempts"
                )
                raise RetryExhaustedError(state.attempt + 1, state.last_error)

            state.attempt += 1
            delay = linear_backoff(state.attempt, self.config.base_delay_seconds)
            logger.info(f"Retrying {operation.name}, attempt {state.attempt + 1}, delay {delay}s")
            await self._sleep(delay)
