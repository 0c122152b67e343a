"""Request Validator - Checks caller parameters before any I/O happens.

Each operation gets a Pydantic model generated from its parameter specs.
Pydantic reports every violated constraint of a call at once, which is
what the caller needs to correct a request in one round trip.
"""

import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from .exceptions import RequestValidationError
from .types import FieldViolation, OperationDefinition, ParameterSpec, ParameterType

logger = logging.getLogger(__name__)


def _base_annotation(spec: ParameterSpec) -> Any:
    """Python type, with constraints attached, for one parameter spec."""
    if spec.type == ParameterType.STRING:
        return Annotated[str, Field(min_length=1)]
    if spec.type == ParameterType.TEXT:
        return str
    if spec.type == ParameterType.POSITIVE_INTEGER:
        return Annotated[int, Field(gt=0)]
    if spec.type == ParameterType.BOOLEAN:
        return bool
    if spec.type == ParameterType.STRING_MAP:
        return Dict[str, str]
    if spec.type == ParameterType.OBJECT:
        return Dict[str, Any]
    if spec.type == ParameterType.ENUM:
        if not spec.choices:
            raise ValueError(f"Enum parameter '{spec.name}' declares no choices")
        return Literal[tuple(spec.choices)]
    raise ValueError(f"Unsupported parameter type: {spec.type}")


def build_parameter_model(definition: OperationDefinition) -> Type[BaseModel]:
    """Create the validation model for an operation's parameters."""
    fields: Dict[str, Any] = {}
    for spec in definition.parameters:
        annotation = _base_annotation(spec)
        if spec.required:
            fields[spec.name] = (annotation, Field(..., description=spec.description))
        else:
            fields[spec.name] = (
                Optional[annotation],
                Field(spec.default, description=spec.description),
            )

    model_name = "".join(part.capitalize() for part in definition.name.split("-")) + "Params"
    return create_model(
        model_name,
        __config__=ConfigDict(extra="forbid"),
        **fields,
    )


def violations_from_error(error: ValidationError) -> List[FieldViolation]:
    violations = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "parameters"
        violations.append(FieldViolation(field=field, message=item["msg"]))
    return violations


class RequestValidator:
    """
    Validate operation parameters against their declared schema.

    Generated models are cached per operation name.
    """

    def __init__(self):
        self._models: Dict[str, Type[BaseModel]] = {}

    def model_for(self, definition: OperationDefinition) -> Type[BaseModel]:
        model = self._models.get(definition.name)
        if model is None:
            model = build_parameter_model(definition)
            self._models[definition.name] = model
        return model

    def validate(
        self,
        definition: OperationDefinition,
        params: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Validate parameters for an operation.

        Args:
            definition: Operation whose schema applies
            params: Caller-supplied parameters

        Returns:
            Validated parameters, with unset optional values dropped

        Raises:
            RequestValidationError: With every violated field
        """
        model = self.model_for(definition)
        try:
            validated = model.model_validate(params or {})
        except ValidationError as e:
            violations = violations_from_error(e)
            logger.info(
                f"Rejected {definition.name}: "
                f"{', '.join(v.field for v in violations)}"
            )
            raise RequestValidationError(definition.name, violations) from e

        return validated.model_dump(exclude_none=True)

    def unknown_operation(self, name: str) -> RequestValidationError:
        """Validation error for an operation name missing from the catalog."""
        return RequestValidationError(
            name,
            [FieldViolation(field="operation", message=f"Unknown operation: {name}")],
        )
