"""Transport Adapters - Backend-specific execution of remote operations.

This package contains the adapters that perform one attempt of an
operation, either as a REST call or as a CLI process.
"""

from .base import BaseTransportAdapter
from .http_api import BunnyshellApiAdapter
from .cli import BunnyshellCliAdapter

__all__ = [
    "BaseTransportAdapter",
    "BunnyshellApiAdapter",
    "BunnyshellCliAdapter",
]
