"""Tests for the Response Normalizer."""

import pytest
from pydantic import ValidationError

from remote_execution import (
    Backend,
    ErrorKind,
    FieldViolation,
    HttpOutcome,
    OperationDefinition,
    OperationError,
    OperationResult,
    ProcessOutcome,
    ResponseNormalizer,
    RetryExhaustedError,
    TransportError,
    TransportErrorKind,
)


@pytest.fixture
def normalizer():
    return ResponseNormalizer()


def _http(result="record"):
    return OperationDefinition(
        name="get-environment",
        backend=Backend.HTTP,
        method="GET",
        path="/environments/{environment}",
        result=result,
    )


def _cli(result="auto"):
    return OperationDefinition(
        name="list-environments",
        backend=Backend.CLI,
        command=["environments", "list"],
        result=result,
    )


class TestHttpOutcomes:
    """Normalization of HTTP responses."""

    def test_json_record(self, normalizer):
        result = normalizer.normalize(
            HttpOutcome(status_code=200, body='{"id": "env-1", "name": "demo"}'),
            _http(),
        )

        assert result.success
        assert result.error is None
        assert result.data == {"id": "env-1", "name": "demo"}

    def test_bare_list_is_wrapped(self, normalizer):
        result = normalizer.normalize(
            HttpOutcome(status_code=200, body='[{"id": "c1"}, {"id": "c2"}]'),
            _http("list"),
        )

        assert result.data == {"items": [{"id": "c1"}, {"id": "c2"}]}

    def test_wrapped_list_passes_through(self, normalizer):
        body = '{"items": [], "total": 0}'
        result = normalizer.normalize(HttpOutcome(status_code=200, body=body), _http("list"))

        assert result.data == {"items": [], "total": 0}

    def test_void_has_no_data(self, normalizer):
        result = normalizer.normalize(HttpOutcome(status_code=204, body=""), _http("void"))

        assert result.success
        assert result.data is None

    def test_void_ignores_body(self, normalizer):
        result = normalizer.normalize(
            HttpOutcome(status_code=200, body='{"status": "queued"}'), _http("void")
        )

        assert result.success
        assert result.data is None

    def test_text_body(self, normalizer):
        result = normalizer.normalize(
            HttpOutcome(status_code=200, body="line one\nline two"), _http("text")
        )

        assert result.data == "line one\nline two"

    @pytest.mark.parametrize("body", ["42", '{"level": "info", "msg": "started"}'])
    def test_text_body_is_never_parsed(self, normalizer, body):
        result = normalizer.normalize(HttpOutcome(status_code=200, body=body), _http("text"))

        assert result.data == body

    def test_empty_text_body(self, normalizer):
        result = normalizer.normalize(HttpOutcome(status_code=200, body=""), _http("text"))

        assert result.data is None

    def test_error_message_from_body(self, normalizer):
        result = normalizer.normalize(
            HttpOutcome(status_code=404, body='{"message": "not found"}'), _http()
        )

        assert not result.success
        assert result.data is None
        assert result.error.kind == ErrorKind.API_ERROR
        assert result.error.message == "not found"
        assert result.error.details["status_code"] == 404
        assert result.error.details["body"] == '{"message": "not found"}'
        assert result.error.details["parsed"] == {"message": "not found"}

    def test_non_json_error_body_kept_verbatim(self, normalizer):
        result = normalizer.normalize(
            HttpOutcome(status_code=502, body="<html>Bad Gateway</html>"), _http()
        )

        assert result.error.details == {
            "status_code": 502,
            "body": "<html>Bad Gateway</html>",
        }

    @pytest.mark.parametrize("body", ["", "<html>Bad Gateway</html>", '{"detail": "x"}', "[]"])
    def test_error_without_message(self, normalizer, body):
        result = normalizer.normalize(HttpOutcome(status_code=502, body=body), _http())

        assert result.error.kind == ErrorKind.API_ERROR
        assert result.error.message == "Unknown error"

    def test_normalization_is_idempotent(self, normalizer):
        outcome = HttpOutcome(status_code=404, body='{"message": "not found"}')

        assert normalizer.normalize(outcome, _http()) == normalizer.normalize(outcome, _http())


class TestProcessOutcomes:
    """Normalization of CLI process outcomes."""

    def test_json_stdout(self, normalizer):
        result = normalizer.normalize(
            ProcessOutcome(exit_code=0, stdout='{"embedded": {"item": []}}'), _cli()
        )

        assert result.success
        assert result.data == {"embedded": {"item": []}}
        assert result.diagnostics is None

    def test_plain_stdout_kept_verbatim(self, normalizer):
        result = normalizer.normalize(
            ProcessOutcome(exit_code=0, stdout="Environment env-1 started\n"), _cli()
        )

        assert result.data == "Environment env-1 started\n"

    def test_stderr_on_success_is_diagnostics(self, normalizer):
        result = normalizer.normalize(
            ProcessOutcome(exit_code=0, stdout="[]", stderr="warning: deprecated flag"),
            _cli(),
        )

        assert result.success
        assert result.data == []
        assert result.diagnostics == "warning: deprecated flag"

    def test_empty_output(self, normalizer):
        result = normalizer.normalize(ProcessOutcome(exit_code=0), _cli())

        assert result.success
        assert result.data is None

    def test_non_zero_exit_uses_stderr(self, normalizer):
        result = normalizer.normalize(
            ProcessOutcome(exit_code=1, stdout="", stderr="Error: environment not found\n"),
            _cli(),
        )

        assert not result.success
        assert result.error.kind == ErrorKind.API_ERROR
        assert result.error.message == "Error: environment not found"
        assert result.error.details["exit_code"] == 1

    def test_non_zero_exit_falls_back_to_stdout(self, normalizer):
        result = normalizer.normalize(
            ProcessOutcome(exit_code=2, stdout="usage: bns ..."), _cli()
        )

        assert result.error.message == "usage: bns ..."

    def test_non_zero_exit_without_output(self, normalizer):
        result = normalizer.normalize(ProcessOutcome(exit_code=3), _cli())

        assert result.error.message == "Command exited with status 3"


class TestShortCircuitResults:
    """Results produced without a remote outcome."""

    def test_auth_required(self, normalizer):
        result = normalizer.auth_required("list-projects", "BNS_API_KEY")

        assert not result.success
        assert result.error.kind == ErrorKind.AUTH_REQUIRED
        assert "token is required" in result.error.message
        assert result.error.details == {"env_var": "BNS_API_KEY"}

    def test_validation_failed_lists_violations(self, normalizer):
        result = normalizer.validation_failed(
            "create-project",
            [
                FieldViolation(field="name", message="Field required"),
                FieldViolation(field="organization", message="Field required"),
            ],
        )

        assert result.error.kind == ErrorKind.VALIDATION_ERROR
        fields = [v["field"] for v in result.error.details["violations"]]
        assert fields == ["name", "organization"]

    def test_exhausted_carries_last_message(self, normalizer):
        last = TransportError(TransportErrorKind.TIMEOUT, "GET /projects timed out after 5.0s")

        result = normalizer.exhausted("list-projects", RetryExhaustedError(4, last))

        assert result.error.kind == ErrorKind.EXHAUSTED
        assert result.error.message == "GET /projects timed out after 5.0s"
        assert result.error.details["attempts"] == 4
        assert result.error.details["transport_error"]["kind"] == "timeout"

    def test_internal_error(self, normalizer):
        result = normalizer.internal_error("get-project", KeyError("project"))

        assert result.error.kind == ErrorKind.INTERNAL_ERROR
        assert result.error.details == {"exception": "KeyError"}


class TestOperationResultInvariants:
    """The result model refuses inconsistent combinations."""

    def test_success_with_error_rejected(self):
        with pytest.raises(ValidationError):
            OperationResult(
                operation="x",
                success=True,
                error=OperationError(kind=ErrorKind.API_ERROR, message="boom"),
            )

    def test_failure_without_error_rejected(self):
        with pytest.raises(ValidationError):
            OperationResult(operation="x", success=False)

    def test_failure_with_data_rejected(self):
        with pytest.raises(ValidationError):
            OperationResult(
                operation="x",
                success=False,
                data={"id": 1},
                error=OperationError(kind=ErrorKind.API_ERROR, message="boom"),
            )
