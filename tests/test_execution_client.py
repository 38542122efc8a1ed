import httpx
import pytest

from codearena.errors import TransportError
from codearena.execution.client import EXECUTION_FAILED, OUTPUT_MISMATCH, classify
from codearena.models import RemoteRun
from tests.conftest import piston_run


# ==================== CLASSIFICATION ====================

def test_trailing_newline_is_ignored():
    result = classify(RemoteRun(stdout="5\n"), "5")
    assert result.passed
    assert result.error is None
    assert result.actual_output == "5"


def test_inner_differences_are_a_mismatch():
    result = classify(RemoteRun(stdout="5 "), "05")
    assert not result.passed
    assert result.error == OUTPUT_MISMATCH


def test_stderr_fails_even_with_matching_output():
    result = classify(RemoteRun(stdout="5", stderr="Warning: deprecated\n"), "5")
    assert not result.passed
    assert result.error == "Warning: deprecated"


def test_nonzero_exit_without_stderr():
    result = classify(RemoteRun(stdout="5", exit_code=3), "5")
    assert not result.passed
    assert result.error == "Process exited with code 3"


def test_input_is_carried_into_the_result():
    result = classify(RemoteRun(stdout="2"), "2", input_used="1\n1")
    assert result.input == "1\n1"
    assert result.expected_output == "2"


# ==================== REMOTE CALLS ====================

async def test_execute_sends_language_version_and_stdin(execution_service, execution_client):
    run = await execution_client.execute("print(input())", "python", "7")

    assert run.stdout == "7"
    assert run.exit_code == 0
    assert execution_service.calls == [{
        "language": "python",
        "version": "3.10.0",
        "files": [{"content": "print(input())"}],
        "stdin": "7",
    }]


async def test_run_test_case_normalizes_input(execution_service, execution_client):
    execution_service.responder = lambda payload: piston_run(stdout="6\n")

    result = await execution_client.run_test_case("code", "python", {"input": "1 2 3", "output": "6"})

    assert result.passed
    assert execution_service.calls[0]["stdin"] == "1\n2\n3"


async def test_unreachable_service_is_a_failed_result(execution_service, execution_client):
    def refuse(payload):
        raise httpx.ConnectError("connection refused")

    execution_service.responder = refuse

    result = await execution_client.run_test_case("code", "python", {"input": "1", "output": "1"})

    assert not result.passed
    assert result.error == EXECUTION_FAILED
    assert result.actual_output == ""


async def test_timeout_raises_transport_error(execution_service, execution_client):
    def hang(payload):
        raise httpx.ReadTimeout("timed out")

    execution_service.responder = hang

    with pytest.raises(TransportError, match="timed out"):
        await execution_client.execute("code", "python", "")


@pytest.mark.parametrize("response", [
    httpx.Response(502, text="bad gateway"),
    httpx.Response(200, text="not json"),
    httpx.Response(200, json={"message": "runtime unknown"}),
    httpx.Response(200, json={"run": {"stdout": "", "stderr": "", "code": None, "signal": None}}),
    httpx.Response(200, json={"run": {"stdout": ["x"], "stderr": "", "code": "abc"}}),
    httpx.Response(200, json={"run": {"stdout": "", "stderr": {"msg": "boom"}, "code": 0}}),
    httpx.Response(200, json=["run"]),
])
async def test_malformed_responses_raise_transport_error(execution_service, execution_client, response):
    execution_service.responder = lambda payload: response

    with pytest.raises(TransportError):
        await execution_client.execute("code", "python", "")


async def test_compile_failure_reports_compiler_output(execution_service, execution_client):
    execution_service.responder = lambda payload: piston_run(
        compile_stage={"stdout": "", "stderr": "main.cpp:1: error: expected ';'", "code": 1},
    )

    result = await execution_client.run_test_case("int main(", "cpp", {"input": "", "output": "0"})

    assert not result.passed
    assert result.error == "main.cpp:1: error: expected ';'"


async def test_signal_kill_counts_as_nonzero_exit(execution_service, execution_client):
    execution_service.responder = lambda payload: piston_run(stdout="", code=None, signal="SIGKILL")

    run = await execution_client.execute("while True: pass", "python", "")

    assert run.exit_code == -1


async def test_wrongly_typed_run_fields_fail_the_case(execution_service, execution_client):
    execution_service.responder = lambda payload: {"run": {"stdout": ["x"], "stderr": "", "code": "abc"}}

    result = await execution_client.run_test_case("code", "python", {"input": "1", "output": "1"})

    assert not result.passed
    assert result.error == EXECUTION_FAILED


async def test_compile_failure_without_run_section(execution_service, execution_client):
    # Piston skips the run stage entirely when the build fails
    execution_service.responder = lambda payload: {
        "language": "cpp",
        "version": "10.2.0",
        "compile": {"stdout": "", "stderr": "main.cpp:1: error: expected ';'", "code": 1, "signal": None},
    }

    result = await execution_client.run_test_case("int main(", "cpp", {"input": "", "output": "0"})

    assert not result.passed
    assert result.error == "main.cpp:1: error: expected ';'"


async def test_successful_compile_stage_uses_run_output(execution_service, execution_client):
    execution_service.responder = lambda payload: piston_run(
        stdout="42\n", compile_stage={"stdout": "", "stderr": "", "code": 0},
    )

    result = await execution_client.run_test_case("int main() {}", "cpp", {"input": "", "output": "42"})

    assert result.passed
