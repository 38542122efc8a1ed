from fastapi import APIRouter, Depends, HTTPException, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from codearena.challenges.access import require_owned_challenge
from codearena.database import (
    create_challenge,
    get_challenge,
    join_challenge,
    list_challenge_questions,
    list_challenges,
    serialize_mongo,
    update_challenge,
)
from codearena.dependencies import get_current_admin_id, get_current_user_id, get_db
from codearena.models import ChallengeCreate, ChallengeUpdate

router = APIRouter(prefix="/challenge", tags=["Challenges"])


@router.post("", status_code=201)
async def create_new_challenge(
    data: ChallengeCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    try:
        challenge = await create_challenge(db, data.dict(), admin_id)
        return {
            "success": True,
            "message": "Challenge created successfully",
            "challenge": challenge,
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create challenge: {e}")


@router.get("")
async def get_all_challenges(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    challenges = await list_challenges(db, skip=skip, limit=limit)
    return {"success": True, "challenges": challenges, "count": len(challenges)}


@router.get("/{challenge_id}")
async def get_challenge_details(challenge_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    challenge = await get_challenge(db, challenge_id)
    if not challenge:
        raise HTTPException(status_code=404, detail="Challenge not found")

    challenge = serialize_mongo(challenge)
    challenge["questions"] = await list_challenge_questions(db, challenge_id)
    return {"success": True, "challenge": challenge}


@router.put("/{challenge_id}")
async def update_existing_challenge(
    challenge_id: str,
    data: ChallengeUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    await require_owned_challenge(db, challenge_id, admin_id)

    updates = {k: v for k, v in data.dict().items() if v is not None}
    if not updates:
        raise HTTPException(status_code=400, detail="Nothing to update")

    challenge = await update_challenge(db, challenge_id, updates)
    return {
        "success": True,
        "message": "Challenge updated successfully",
        "challenge": serialize_mongo(challenge),
    }


@router.post("/{challenge_id}/join")
async def join_existing_challenge(
    challenge_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    challenge = await join_challenge(db, challenge_id, user_id)
    if not challenge:
        raise HTTPException(status_code=404, detail="Challenge not found")

    return {
        "success": True,
        "message": "Joined challenge successfully",
        "challenge": serialize_mongo(challenge),
    }
