from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from codearena.challenges.access import require_owned_challenge, require_owned_question
from codearena.database import (
    create_question,
    delete_question,
    get_challenge,
    get_question,
    list_challenge_questions,
    serialize_mongo,
    update_question,
)
from codearena.dependencies import get_current_admin_id, get_db
from codearena.models import QuestionCreate, QuestionUpdate

router = APIRouter(prefix="/question", tags=["Questions"])


def public_question(question: dict) -> dict:
    question = serialize_mongo(question)
    question.pop("testcase_seq", None)
    return question


@router.post("", status_code=201)
async def create_new_question(
    data: QuestionCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    await require_owned_challenge(db, data.challenge_id, admin_id)

    question = await create_question(db, data.dict())
    return {
        "success": True,
        "message": "Question created successfully",
        "question": public_question(question),
    }


@router.get("/challenge/{challenge_id}")
async def get_challenge_questions(challenge_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    if not await get_challenge(db, challenge_id):
        raise HTTPException(status_code=404, detail="Challenge not found")

    questions = await list_challenge_questions(db, challenge_id)
    return {
        "success": True,
        "questions": [public_question(q) for q in questions],
        "count": len(questions),
    }


@router.get("/{question_id}")
async def get_question_details(question_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    question = await get_question(db, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return {"success": True, "question": public_question(question)}


@router.put("/{question_id}")
async def update_existing_question(
    question_id: str,
    data: QuestionUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    await require_owned_question(db, question_id, admin_id)

    updates = {k: v for k, v in data.dict().items() if v is not None}
    if not updates:
        raise HTTPException(status_code=400, detail="Nothing to update")

    question = await update_question(db, question_id, updates)
    return {
        "success": True,
        "message": "Question updated successfully",
        "question": public_question(question),
    }


@router.delete("/{question_id}")
async def delete_existing_question(
    question_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    await require_owned_question(db, question_id, admin_id)
    await delete_question(db, question_id)
    return {"success": True, "message": "Question deleted successfully"}
