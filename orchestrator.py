import logging
from typing import Optional

from config import Settings, get_settings
from remote_execution import (
    Backend,
    BunnyshellApiAdapter,
    BunnyshellCliAdapter,
    ExecutionOrchestrator,
    RetryConfig,
    get_credential_resolver,
)

logger = logging.getLogger(__name__)


def build_orchestrator(settings: Settings) -> ExecutionOrchestrator:
    """Create an execution orchestrator wired from application settings."""
    adapters = {
        Backend.HTTP: BunnyshellApiAdapter(
            base_url=settings.bunnyshell_api_url,
            auth_header=settings.auth_header,
            auth_scheme=settings.auth_scheme,
            retry_statuses=settings.retry_statuses,
        ),
        Backend.CLI: BunnyshellCliAdapter(binary=settings.bns_binary),
    }
    retry_config = RetryConfig(
        max_retries=settings.max_retries,
        base_delay_seconds=settings.retry_delay_seconds,
        timeout_seconds=settings.request_timeout_seconds,
    )
    logger.info(
        f"Building orchestrator - token env var {settings.token_env_var}, "
        f"CLI binary {settings.bns_binary}"
    )
    return ExecutionOrchestrator(
        resolver=get_credential_resolver(settings.token_env_var),
        adapters=adapters,
        retry_config=retry_config,
    )


# Singleton instance
_orchestrator: Optional[ExecutionOrchestrator] = None


def get_orchestrator() -> ExecutionOrchestrator:
    """Get the orchestrator singleton."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(get_settings())
    return _orchestrator
