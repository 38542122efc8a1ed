from fastapi import APIRouter, Depends, HTTPException, Response
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from codearena.auth.security import (
    clear_session_cookie,
    hash_password,
    issue_session,
    set_session_cookie,
    verify_credentials,
)
from codearena.config import USER_COOKIE_NAME
from codearena.database import (
    create_account,
    delete_account,
    get_account,
    get_account_by_email,
    get_progress,
    list_user_progress,
    serialize_mongo,
    update_account,
)
from codearena.dependencies import get_current_user_id, get_db
from codearena.models import AccountCreate, AccountLogin, AccountUpdate

router = APIRouter(prefix="/user", tags=["Users"])


def public_user(user: dict) -> dict:
    return {
        "user_id": user["user_id"],
        "username": user["username"],
        "email": user["email"],
        "score": user.get("score", 0),
        "challenges_participated": user.get("challenges_participated", []),
    }


# ==================== SESSION ENDPOINTS ====================

@router.post("/register")
async def register_user(data: AccountCreate, response: Response, db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        if await get_account_by_email(db, "user", data.email):
            raise HTTPException(status_code=400, detail="User already exists")

        try:
            user = await create_account(db, "user", {
                "username": data.username,
                "email": data.email,
                "password": hash_password(data.password),
            })
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail="User already exists")

        token = issue_session(user["user_id"], "user")
        set_session_cookie(response, USER_COOKIE_NAME, token)

        return {
            "success": True,
            "message": "User registered successfully",
            "user": {**public_user(user), "token": token},
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Server error while registering user: {e}")


@router.post("/login")
async def login_user(data: AccountLogin, response: Response, db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        user = await verify_credentials(db, "user", data.email, data.password)
        if not user:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        token = issue_session(user["user_id"], "user")
        set_session_cookie(response, USER_COOKIE_NAME, token)

        return {
            "success": True,
            "message": "User logged in successfully",
            "user": public_user(user),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Server error while logging in user: {e}")


@router.get("/logout")
async def logout_user(response: Response, user_id: str = Depends(get_current_user_id)):
    clear_session_cookie(response, USER_COOKIE_NAME)
    return {"success": True, "message": "User logged out successfully"}


# ==================== PROFILE ENDPOINTS ====================

@router.get("/profile")
async def get_user_profile(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    user = await get_account(db, "user", user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "user": public_user(user)}


@router.put("/profile")
async def update_user_profile(
    data: AccountUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    try:
        updates = {}
        if data.username:
            updates["username"] = data.username.strip()
        if data.email:
            owner = await get_account_by_email(db, "user", data.email)
            if owner and owner["user_id"] != user_id:
                raise HTTPException(status_code=400, detail="Email already in use")
            updates["email"] = data.email
        if data.password:
            updates["password"] = hash_password(data.password)

        try:
            user = await update_account(db, "user", user_id, updates)
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail="Email already in use")
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        return {
            "success": True,
            "message": "User profile updated successfully",
            "user": {**public_user(user), "token": issue_session(user_id, "user")},
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Server error while updating user profile: {e}")


@router.delete("/profile")
async def delete_user(
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    if not await delete_account(db, "user", user_id):
        raise HTTPException(status_code=404, detail="User not found")

    clear_session_cookie(response, USER_COOKIE_NAME)
    return {"success": True, "message": "User removed successfully"}


# ==================== PROGRESS ENDPOINTS ====================

@router.get("/progress")
async def get_my_progress(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Progress across every challenge the user has scored in"""
    progress = await list_user_progress(db, user_id)
    return {"success": True, "progress": progress, "count": len(progress)}


@router.get("/progress/{challenge_id}")
async def get_my_challenge_progress(
    challenge_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    progress = await get_progress(db, user_id, challenge_id)
    if not progress:
        raise HTTPException(status_code=404, detail="No progress yet for this challenge")
    return {"success": True, "progress": serialize_mongo(progress)}
