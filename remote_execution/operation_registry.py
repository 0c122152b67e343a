"""Operation Registry - Catalog of remote operations loaded from YAML.

The registry is the source of truth for every operation the layer can
run. Operations not in the registry cannot be executed.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError

from .types import Backend, OperationDefinition

logger = logging.getLogger(__name__)


class OperationRegistry:
    """
    Central catalog of operations exposed to the assistant.

    Responsibilities:
    - Load operation definitions from the YAML catalog
    - Declare parameter schemas and wire locations
    - Declare backend, result shape and timeouts
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._default_config_path()
        self._operations: Dict[str, OperationDefinition] = {}
        self._loaded = False

    def _default_config_path(self) -> str:
        """Get the catalog shipped with this package."""
        return str(Path(__file__).parent / "operations.yaml")

    def load(self) -> None:
        """
        Load operation definitions from the YAML catalog.

        Raises:
            FileNotFoundError: If the catalog does not exist
            ValueError: If an entry is malformed or a name is duplicated
        """
        if self._loaded:
            return

        with open(self.config_path, "r") as f:
            config = yaml.safe_load(f) or {}

        for entry in config.get("operations", []):
            try:
                definition = OperationDefinition(**entry)
            except ValidationError as e:
                name = entry.get("name", "<unnamed>")
                raise ValueError(f"Invalid operation '{name}' in {self.config_path}: {e}") from e
            self.register(definition)

        self._loaded = True
        logger.info(f"Operation registry loaded: {len(self._operations)} operations")

    def register(self, definition: OperationDefinition) -> None:
        """
        Register an operation.

        Raises:
            ValueError: If an operation with the same name already exists
        """
        if definition.name in self._operations:
            raise ValueError(f"Operation '{definition.name}' is already registered")

        self._operations[definition.name] = definition
        logger.debug(f"Registered operation: {definition.name} ({definition.backend.value})")

    def get(self, name: str) -> Optional[OperationDefinition]:
        """Get an operation by name."""
        return self._operations.get(name)

    def exists(self, name: str) -> bool:
        """Check if an operation is registered."""
        return name in self._operations

    def list_operations(self, backend: Optional[Backend] = None) -> List[OperationDefinition]:
        """List operations, optionally only those of one backend."""
        operations = list(self._operations.values())
        if backend:
            operations = [op for op in operations if op.backend == backend]
        return operations

    @property
    def operation_count(self) -> int:
        """Get total number of registered operations."""
        return len(self._operations)

    @property
    def is_loaded(self) -> bool:
        return self._loaded


# Singleton instance
_registry: Optional[OperationRegistry] = None


def get_operation_registry() -> OperationRegistry:
    """Get the operation registry singleton, loaded."""
    global _registry
    if _registry is None:
        _registry = OperationRegistry()
        _registry.load()
    return _registry
