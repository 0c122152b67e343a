from typing import List, Dict, Any, Optional
from .types import OperationDefinition
from .validator import RequestValidator


class OperationSchemaGenerator:
    """Generates JSON schemas for operations to be offered to the assistant as tools."""

    def __init__(self, validator: Optional[RequestValidator] = None):
        self._validator = validator or RequestValidator()

    def generate_schema(self, definition: OperationDefinition) -> Dict[str, Any]:
        """
        Convert an OperationDefinition into a tool schema dictionary.
        This follows the function calling schema as a standard.
        """
        # The validation model is the single source of the parameter schema
        parameters = self._validator.model_for(definition).model_json_schema()
        parameters.pop("title", None)

        return {
            "name": definition.name,
            "description": definition.description,
            "parameters": parameters,
        }

    def generate_schemas(self, definitions: List[OperationDefinition]) -> List[Dict[str, Any]]:
        """Generate schemas for a list of operations."""
        return [self.generate_schema(definition) for definition in definitions]
