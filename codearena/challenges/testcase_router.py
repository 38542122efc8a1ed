from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from codearena.challenges.access import require_owned_question
from codearena.database import create_test_case, delete_test_case, get_test_case, list_test_cases
from codearena.dependencies import get_current_admin_id, get_db
from codearena.models import TestCaseCreate

router = APIRouter(prefix="/testCase", tags=["Test Cases"])


@router.post("", status_code=201)
async def add_test_case(
    data: TestCaseCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    await require_owned_question(db, data.question_id, admin_id)

    test_case = await create_test_case(db, data.dict())
    if not test_case:
        # Question removed between the ownership check and the insert
        raise HTTPException(status_code=404, detail="Question not found")

    return {
        "success": True,
        "message": "Test case added successfully",
        "test_case": test_case,
    }


@router.get("/question/{question_id}")
async def get_question_test_cases(
    question_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    """Test cases of a question, in the order submissions run them"""
    await require_owned_question(db, question_id, admin_id)

    test_cases = await list_test_cases(db, question_id)
    return {"success": True, "test_cases": test_cases, "count": len(test_cases)}


@router.delete("/{testcase_id}")
async def remove_test_case(
    testcase_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    test_case = await get_test_case(db, testcase_id)
    if not test_case:
        raise HTTPException(status_code=404, detail="Test case not found")

    await require_owned_question(db, test_case["question_id"], admin_id)
    await delete_test_case(db, testcase_id)
    return {"success": True, "message": "Test case deleted successfully"}
