"""Bunnyshell CLI Adapter - Process backend of the transport layer.

Runs the ``bns`` binary once per attempt, without a shell, and captures
its exit status, stdout and stderr.
"""

import asyncio
import logging
import shutil
from typing import List

from .base import BaseTransportAdapter
from ..credentials import mask_token
from ..exceptions import TransportError
from ..types import Backend, ProcessOutcome, ResolvedOperation, TransportErrorKind

logger = logging.getLogger(__name__)


class BunnyshellCliAdapter(BaseTransportAdapter):
    """
    Adapter for the Bunnyshell command-line binary.

    Every invocation gets three flags appended:
    - ``--token <token>`` with the resolved credential
    - ``--output json`` requesting structured output
    - ``--non-interactive`` suppressing prompts

    A non-zero exit status is returned like any other outcome. Text on
    stderr does not mean failure either; the normalizer decides.
    """

    OUTPUT_FORMAT = "json"

    def __init__(self, binary: str = "bns"):
        super().__init__()
        self.name = "bunnyshell_cli"
        self.backend = Backend.CLI
        self.binary = binary
        self._available: bool = False

    async def initialize(self) -> None:
        """Check whether the binary can be found on PATH."""
        self._available = shutil.which(self.binary) is not None
        if not self._available:
            logger.warning(f"Bunnyshell CLI '{self.binary}' not found on PATH")
        await super().initialize()

    def is_available(self) -> bool:
        """Check if the binary was found."""
        return self._available

    def build_command(self, operation: ResolvedOperation) -> List[str]:
        """Full argv for one attempt, credential flags included."""
        return [
            self.binary,
            *operation.argv,
            "--token",
            operation.credential.token.get_secret_value(),
            "--output",
            self.OUTPUT_FORMAT,
            "--non-interactive",
        ]

    def _loggable(self, cmd: List[str]) -> str:
        shown = list(cmd)
        for i, arg in enumerate(shown[:-1]):
            if arg == "--token":
                shown[i + 1] = mask_token(shown[i + 1])
        return " ".join(shown)

    async def execute(
        self,
        operation: ResolvedOperation,
        timeout_seconds: float,
    ) -> ProcessOutcome:
        """Run the binary and wait for it, killing it at the deadline."""
        cmd = self.build_command(operation)
        logger.info(f"Executing: {self._loggable(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TransportError(
                TransportErrorKind.SPAWN_FAILED,
                f"Could not start {self.binary}: {e}",
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout_seconds,
            )
        except asyncio.TimeoutError:
            try:
                process.kill()
            except ProcessLookupError:
                pass  # exited between the deadline and the kill
            await process.wait()
            raise TransportError(
                TransportErrorKind.TIMEOUT,
                f"{self.binary} {' '.join(operation.argv)} timed out after {timeout_seconds}s",
            )

        stdout_str = stdout.decode("utf-8", errors="replace")
        stderr_str = stderr.decode("utf-8", errors="replace")

        logger.debug(f"{operation.name} exited with {process.returncode}")

        return ProcessOutcome(
            exit_code=process.returncode,
            stdout=stdout_str,
            stderr=stderr_str,
        )
