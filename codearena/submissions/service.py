import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from codearena.database import get_question, list_test_cases
from codearena.errors import NotFoundError, PersistenceError, SubmissionValidationError
from codearena.execution.engine import EvaluationEngine
from codearena.execution.languages import LANGUAGE_VERSIONS, is_supported
from codearena.models import AggregateVerdict, ScoreOutcome, SubmissionCreate
from codearena.submissions.scoring import ScoreAggregator

logger = logging.getLogger(__name__)


async def submit_solution(
    db: AsyncIOMotorDatabase,
    engine: EvaluationEngine,
    user_id: str,
    payload: SubmissionCreate,
) -> tuple[ScoreOutcome, AggregateVerdict]:
    """
    Validate a submission, run it against the question's test cases and score it.

    Raises SubmissionValidationError / NotFoundError before anything is
    executed, PersistenceError if the store fails.
    """
    if not all([payload.challenge_id, payload.question_id, payload.code, payload.language]):
        raise SubmissionValidationError("All fields are required")

    language = payload.language.strip().lower()
    if not is_supported(language):
        raise SubmissionValidationError(
            f"Unsupported language: {payload.language}. Supported: {sorted(LANGUAGE_VERSIONS)}"
        )

    try:
        question = await get_question(db, payload.question_id)
        if not question or question.get("challenge_id") != payload.challenge_id:
            raise NotFoundError("Question not found in this challenge")

        test_cases = await list_test_cases(db, payload.question_id)
    except PyMongoError as e:
        raise PersistenceError(f"Could not load question: {e}") from e

    if not test_cases:
        raise NotFoundError("No test cases found for this question")

    logger.info(
        "evaluation_started",
        extra={
            "user_id": user_id,
            "challenge_id": payload.challenge_id,
            "question_id": payload.question_id,
            "language": language,
            "stage": "evaluate",
            "test_cases": len(test_cases),
        },
    )

    verdict = await engine.evaluate(payload.code, language, test_cases)

    aggregator = ScoreAggregator(db)
    outcome = await aggregator.score(
        user_id,
        payload.challenge_id,
        question,
        verdict,
        payload.code,
        language,
    )
    return outcome, verdict
