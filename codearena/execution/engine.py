"""
Evaluation Engine
Runs a submission against a question's test cases, in order, fail-fast
"""

import logging
from typing import List

from codearena.execution.client import ExecutionClient
from codearena.models import AggregateVerdict, EvaluationResult

logger = logging.getLogger(__name__)


class EvaluationEngine:
    def __init__(self, execution_client: ExecutionClient):
        self.execution_client = execution_client

    async def evaluate(self, code: str, language: str, test_cases: List[dict]) -> AggregateVerdict:
        """
        Execute test cases sequentially and stop at the first failure.

        Cases after the first failure are never sent to the remote service, so
        `passed_count` only counts what actually ran. An empty list passes.
        """
        results: List[EvaluationResult] = []

        for test_case in test_cases:
            result = await self.execution_client.run_test_case(code, language, test_case)
            results.append(result)

            if not result.passed:
                logger.info(
                    "evaluation_stopped",
                    extra={
                        "language": language,
                        "stage": "evaluate",
                        "failed_case": len(results),
                        "total_cases": len(test_cases),
                    },
                )
                return AggregateVerdict(
                    total_count=len(test_cases),
                    passed_count=len(results) - 1,
                    first_error=result.error,
                    results=results,
                    all_passed=False,
                )

        return AggregateVerdict(
            total_count=len(test_cases),
            passed_count=len(results),
            first_error=None,
            results=results,
            all_passed=True,
        )
