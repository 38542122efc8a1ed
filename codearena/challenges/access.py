from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from codearena.database import get_challenge, get_question


async def require_owned_challenge(db: AsyncIOMotorDatabase, challenge_id: str, admin_id: str) -> dict:
    """Challenge document if it exists and was created by this admin"""
    challenge = await get_challenge(db, challenge_id)
    if not challenge:
        raise HTTPException(status_code=404, detail="Challenge not found")
    if challenge["created_by"] != admin_id:
        raise HTTPException(status_code=403, detail="Not authorized to modify this challenge")
    return challenge


async def require_owned_question(db: AsyncIOMotorDatabase, question_id: str, admin_id: str) -> dict:
    question = await get_question(db, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    await require_owned_challenge(db, question["challenge_id"], admin_id)
    return question
