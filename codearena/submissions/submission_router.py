import logging

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from codearena.database import (
    delete_submission,
    list_question_submissions,
    list_user_submissions,
)
from codearena.dependencies import get_current_admin_id, get_current_user_id, get_db, get_evaluation_engine
from codearena.errors import NotFoundError, SubmissionValidationError
from codearena.execution.engine import EvaluationEngine
from codearena.models import SubmissionCreate
from codearena.submissions.service import submit_solution

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/submission", tags=["Submissions"])


@router.post("", status_code=201)
async def create_new_submission(
    payload: SubmissionCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    engine: EvaluationEngine = Depends(get_evaluation_engine),
    user_id: str = Depends(get_current_user_id)
):
    """
    Evaluate and record a submission.

    A recorded attempt is always 201; whether the code passed is in `status`.
    """
    try:
        outcome, verdict = await submit_solution(db, engine, user_id, payload)
    except SubmissionValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("submission_failed", extra={"user_id": user_id, "stage": "submit"})
        raise HTTPException(status_code=500, detail=f"Error submitting solution: {e}")

    if outcome.status == "pass":
        message = "All test cases passed"
    else:
        message = f"Failed on test case {verdict.passed_count + 1}: {verdict.first_error}"

    return {
        "success": True,
        "status": outcome.status,
        "message": message,
        "submission": outcome.submission,
        "verdict": verdict.dict(),
        "awarded_score": outcome.awarded_score.to_document(),
        "progress": outcome.progress,
    }


@router.get("/user")
async def get_my_submissions(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    submissions = await list_user_submissions(db, user_id)
    return {"success": True, "submissions": submissions, "count": len(submissions)}


@router.get("/challenge/{challenge_id}/question/{question_id}")
async def get_question_attempts(
    challenge_id: str,
    question_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    submissions = await list_question_submissions(db, user_id, challenge_id, question_id)
    if not submissions:
        raise HTTPException(status_code=404, detail="No submissions found for this question")
    return {"success": True, "submissions": submissions, "count": len(submissions)}


@router.delete("/{submission_id}")
async def remove_submission(
    submission_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    if not await delete_submission(db, submission_id):
        raise HTTPException(status_code=404, detail="Submission not found")
    return {"success": True, "message": "Submission deleted successfully"}
