"""Credential Resolver - Decides which API token a call runs with.

Three sources compete for every call: an explicit per-call token, the
session token remembered by this process, and an environment variable.
"""

import logging
import os
import re
import threading
from typing import Optional

from .types import Credential, CredentialSource

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_ENV_VAR = "BNS_API_KEY"

_TOKEN_PATTERN = re.compile(r"token:\s*([^\s]+)", re.IGNORECASE)


def extract_token_from_message(message: Optional[str]) -> Optional[str]:
    """
    Extract a ``token: XYZ`` fragment from free text.

    Args:
        message: Text that might contain a token

    Returns:
        The token, or None if the text carries none
    """
    if not message:
        return None
    match = _TOKEN_PATTERN.search(message)
    if match:
        return match.group(1)
    return None


def strip_token_from_message(message: str) -> str:
    """Remove the first ``token: XYZ`` fragment and surrounding whitespace."""
    return _TOKEN_PATTERN.sub("", message, count=1).strip()


def mask_token(token: str) -> str:
    """Short, log-safe representation of a token."""
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-2:]}"


class CredentialResolver:
    """
    Resolve the credential for a call by strict precedence.

    Precedence:
    - explicit token passed with the call
    - session token remembered by this resolver
    - environment variable, read at every resolution

    The first explicit token seen becomes the session token, so an
    operator authenticates once per process. The first write is a
    compare-and-set under a lock; later explicit tokens do not replace it.
    Only ``set_session_token`` overwrites deliberately.
    """

    def __init__(self, env_var: str = DEFAULT_TOKEN_ENV_VAR):
        self.env_var = env_var
        self._session_token: Optional[str] = None
        self._lock = threading.Lock()

    def resolve(
        self,
        explicit: Optional[str] = None,
        allow_session_update: bool = True,
    ) -> Optional[Credential]:
        """
        Resolve the credential for one call.

        Args:
            explicit: Token supplied with the call, if any
            allow_session_update: Remember ``explicit`` as the session
                token when none is set yet

        Returns:
            The selected Credential, or None when no source has a token.
            None is a regular outcome that callers turn into an
            "authentication required" response.
        """
        if explicit:
            if allow_session_update:
                self._set_session_if_absent(explicit)
            return Credential(token=explicit, source=CredentialSource.EXPLICIT)

        session_token = self._session_token
        if session_token:
            return Credential(token=session_token, source=CredentialSource.SESSION)

        env_token = os.environ.get(self.env_var)
        if env_token:
            return Credential(token=env_token, source=CredentialSource.ENVIRONMENT)

        logger.info("No Bunnyshell API token found")
        return None

    def _set_session_if_absent(self, token: str) -> bool:
        with self._lock:
            if self._session_token is not None:
                return False
            self._session_token = token
        logger.info(f"Session token set from explicit token {mask_token(token)}")
        return True

    def set_session_token(self, token: str) -> None:
        """Replace the session token unconditionally."""
        with self._lock:
            self._session_token = token
        logger.info(f"Session token replaced with {mask_token(token)}")

    def clear_session(self) -> None:
        """Forget the session token."""
        with self._lock:
            self._session_token = None

    @property
    def session_token(self) -> Optional[str]:
        return self._session_token

    @property
    def has_session_token(self) -> bool:
        return self._session_token is not None


# Singleton instance
_resolver: Optional[CredentialResolver] = None


def get_credential_resolver(env_var: str = DEFAULT_TOKEN_ENV_VAR) -> CredentialResolver:
    """Get or create the process-wide credential resolver."""
    global _resolver
    if _resolver is None:
        _resolver = CredentialResolver(env_var=env_var)
    return _resolver
