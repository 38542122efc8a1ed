"""
Execution Client
Runs one test case per call against the remote Piston-compatible service
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from codearena.config import EXECUTION_API_URL, EXECUTION_TIMEOUT_SECONDS
from codearena.errors import TransportError
from codearena.execution.languages import LANGUAGE_VERSIONS, normalize_input
from codearena.models import EvaluationResult, RemoteRun

logger = logging.getLogger(__name__)

EXECUTION_FAILED = "Execution failed"
OUTPUT_MISMATCH = "Output mismatch"


def classify(run: RemoteRun, expected_output: str, input_used: str = "") -> EvaluationResult:
    """Turn a remote run into a pass/fail result for one test case.

    Only leading/trailing whitespace is ignored when comparing output.
    """
    actual = (run.stdout or "").strip()
    expected = (expected_output or "").strip()
    stderr = (run.stderr or "").strip()

    error: Optional[str] = None
    if stderr:
        error = stderr
    elif run.exit_code != 0:
        error = f"Process exited with code {run.exit_code}"
    elif actual != expected:
        error = OUTPUT_MISMATCH

    return EvaluationResult(
        input=input_used,
        expected_output=expected,
        actual_output=actual,
        error=error,
        passed=error is None,
    )


class ExecutionClient:
    """Thin wrapper over the remote execution API.

    The underlying httpx client is owned by the caller so it can be shared
    across requests and swapped for a mock transport in tests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = EXECUTION_API_URL,
        timeout: float = EXECUTION_TIMEOUT_SECONDS,
    ):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def execute(self, code: str, language: str, stdin: str) -> RemoteRun:
        """POST one program run. Raises TransportError on any transport problem."""
        payload = {
            "language": language,
            "version": LANGUAGE_VERSIONS.get(language),
            "files": [{"content": code}],
            "stdin": stdin,
        }

        try:
            response = await self.http_client.post(
                f"{self.base_url}/execute",
                json=payload,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Execution timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Execution service unreachable: {e}") from e

        if not response.is_success:
            raise TransportError(f"Execution service returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError("Execution service returned a non-JSON body") from e

        if not isinstance(data, dict):
            raise TransportError("Execution service response is not an object")

        try:
            return self._parse_run(data)
        except (ValidationError, TypeError) as e:
            raise TransportError("Execution service returned a malformed run section") from e

    @staticmethod
    def _parse_run(data: dict) -> RemoteRun:
        # A failed build skips the run stage, so compile is checked first
        compile_stage = data.get("compile")
        if isinstance(compile_stage, dict) and compile_stage.get("code") not in (0, None):
            return RemoteRun(
                stdout="",
                stderr=compile_stage.get("stderr") or compile_stage.get("output") or "Compilation failed",
                exit_code=compile_stage["code"],
            )

        run = data.get("run")
        if not isinstance(run, dict):
            raise TransportError("Execution service response has no run section")

        exit_code = run.get("code")
        if exit_code is None:
            if not run.get("signal"):
                raise TransportError("Execution service response has no exit code")
            # Killed by a signal (time or memory limit on the runner)
            exit_code = -1

        stdout = run.get("stdout")
        if stdout is None:
            stdout = run.get("output") or ""

        return RemoteRun(stdout=stdout, stderr=run.get("stderr") or "", exit_code=exit_code)

    async def run_test_case(self, code: str, language: str, test_case: dict) -> EvaluationResult:
        stdin = normalize_input(language, test_case.get("input"))
        expected = test_case.get("output") or ""

        try:
            run = await self.execute(code, language, stdin)
        except TransportError as e:
            logger.warning(
                "remote_execution_failed",
                extra={"language": language, "stage": "execute", "error": str(e)},
            )
            return EvaluationResult(
                input=stdin,
                expected_output=expected.strip(),
                actual_output="",
                error=EXECUTION_FAILED,
                passed=False,
            )

        return classify(run, expected, stdin)
