"""Tests for the Request Validator."""

import pytest

from remote_execution import (
    Backend,
    OperationDefinition,
    ParameterSpec,
    RequestValidationError,
    RequestValidator,
)


@pytest.fixture
def validator():
    return RequestValidator()


@pytest.fixture
def definition():
    return OperationDefinition(
        name="create-environment",
        backend=Backend.CLI,
        command=["environments", "create"],
        parameters=[
            ParameterSpec(name="name", required=True),
            ParameterSpec(name="project", required=True),
            ParameterSpec(name="description", type="text"),
            ParameterSpec(name="page", type="positive_integer", default=1),
            ParameterSpec(name="labels", type="string_map"),
            ParameterSpec(name="status", type="enum", choices=["running", "stopped"]),
            ParameterSpec(name="force", type="boolean", location="switch"),
        ],
    )


def _fields(exc_info):
    return sorted(v.field for v in exc_info.value.violations)


class TestRequestValidator:
    """Test cases for RequestValidator."""

    def test_valid_parameters(self, validator, definition):
        params = validator.validate(definition, {"name": "env-1", "project": "p1"})

        assert params["name"] == "env-1"
        assert params["project"] == "p1"

    def test_defaults_are_applied(self, validator, definition):
        params = validator.validate(definition, {"name": "env-1", "project": "p1"})

        assert params["page"] == 1

    def test_unset_optional_parameters_are_dropped(self, validator, definition):
        params = validator.validate(definition, {"name": "env-1", "project": "p1"})

        assert "description" not in params
        assert "labels" not in params
        assert "force" not in params

    def test_empty_required_string_is_rejected(self, validator, definition):
        with pytest.raises(RequestValidationError) as exc_info:
            validator.validate(definition, {"name": "", "project": "p1"})

        assert _fields(exc_info) == ["name"]
        assert exc_info.value.operation == "create-environment"

    def test_every_violation_is_reported(self, validator, definition):
        with pytest.raises(RequestValidationError) as exc_info:
            validator.validate(definition, {"name": "", "page": 0})

        assert _fields(exc_info) == ["name", "page", "project"]

    def test_missing_parameters_object(self, validator, definition):
        with pytest.raises(RequestValidationError) as exc_info:
            validator.validate(definition, None)

        assert _fields(exc_info) == ["name", "project"]

    def test_unknown_parameter_is_rejected(self, validator, definition):
        with pytest.raises(RequestValidationError) as exc_info:
            validator.validate(
                definition, {"name": "env-1", "project": "p1", "colour": "blue"}
            )

        assert _fields(exc_info) == ["colour"]

    def test_empty_text_is_allowed(self, validator, definition):
        params = validator.validate(
            definition, {"name": "env-1", "project": "p1", "description": ""}
        )

        assert params["description"] == ""

    def test_enum_choices(self, validator, definition):
        params = validator.validate(
            definition, {"name": "env-1", "project": "p1", "status": "running"}
        )
        assert params["status"] == "running"

        with pytest.raises(RequestValidationError) as exc_info:
            validator.validate(
                definition, {"name": "env-1", "project": "p1", "status": "paused"}
            )
        assert _fields(exc_info) == ["status"]

    def test_string_map_values_must_be_strings(self, validator, definition):
        params = validator.validate(
            definition, {"name": "env-1", "project": "p1", "labels": {"tier": "web"}}
        )
        assert params["labels"] == {"tier": "web"}

        with pytest.raises(RequestValidationError) as exc_info:
            validator.validate(
                definition,
                {"name": "env-1", "project": "p1", "labels": {"tier": ["web"]}},
            )
        assert _fields(exc_info) == ["labels.tier"]

    def test_positive_integer(self, validator, definition):
        params = validator.validate(definition, {"name": "env-1", "project": "p1", "page": 3})
        assert params["page"] == 3

        with pytest.raises(RequestValidationError) as exc_info:
            validator.validate(definition, {"name": "env-1", "project": "p1", "page": -2})
        assert _fields(exc_info) == ["page"]

    def test_model_is_cached(self, validator, definition):
        assert validator.model_for(definition) is validator.model_for(definition)

    def test_unknown_operation(self, validator):
        error = validator.unknown_operation("launch-rocket")

        assert error.operation == "launch-rocket"
        assert [v.field for v in error.violations] == ["operation"]

    def test_enum_without_choices_is_a_definition_error(self, validator):
        definition = OperationDefinition(
            name="broken",
            backend=Backend.CLI,
            command=["broken"],
            parameters=[ParameterSpec(name="mode", type="enum")],
        )

        with pytest.raises(ValueError):
            validator.model_for(definition)
