"""
Scoring & Progress Aggregator
Turns a verdict into a persisted submission and, on a first full pass,
credits the user's challenge progress
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from codearena.database import create_submission, credit_progress, find_passing_submission
from codearena.errors import PersistenceError
from codearena.models import AggregateVerdict, AwardedScore, ScoreOutcome

logger = logging.getLogger(__name__)


class ScoreAggregator:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def score(
        self,
        user_id: str,
        challenge_id: str,
        question: dict,
        verdict: AggregateVerdict,
        code: str,
        language: str,
    ) -> ScoreOutcome:
        """
        Record one evaluation attempt and award points at most once per question.

        A user who already has a passing submission for the question gets
        `already_earned` no matter how this attempt went. Every attempt is
        stored, failures and repeats included.
        """
        question_id = question["question_id"]
        max_score = question.get("max_score", 0)
        status = "pass" if verdict.all_passed else "fail"
        context = {"user_id": user_id, "challenge_id": challenge_id, "question_id": question_id}

        try:
            prior_pass = await find_passing_submission(self.db, user_id, challenge_id, question_id)

            progress = None
            if prior_pass:
                awarded = AwardedScore.previously_earned()
            elif verdict.all_passed:
                # Credit first so the stored award always agrees with progress
                progress = await credit_progress(self.db, user_id, challenge_id, question_id, max_score)
                if progress is None:
                    # A concurrent submission credited this question first
                    logger.info("progress_already_credited", extra={**context, "stage": "score"})
                    awarded = AwardedScore.previously_earned()
                else:
                    awarded = AwardedScore.points(max_score)
            else:
                awarded = AwardedScore.points(0)

            submission = await create_submission(self.db, {
                "user_id": user_id,
                "challenge_id": challenge_id,
                "question_id": question_id,
                "code": code,
                "language": language,
                "status": status,
                "score": awarded.to_document(),
                "passed_count": verdict.passed_count,
                "total_count": verdict.total_count,
                "error": verdict.first_error,
                "results": [r.dict() for r in verdict.results],
            })
        except PyMongoError as e:
            logger.error("submission_persist_failed", extra={**context, "stage": "score", "error": str(e)})
            raise PersistenceError(f"Could not record submission: {e}") from e

        logger.info(
            "submission_scored",
            extra={
                **context,
                "submission_id": submission["submission_id"],
                "stage": "score",
                "status": status,
                "awarded": awarded.to_document(),
            },
        )

        if progress is not None:
            progress.pop("_id", None)

        return ScoreOutcome(
            status=status,
            awarded_score=awarded,
            submission=submission,
            progress=progress,
        )
