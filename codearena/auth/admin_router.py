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
from codearena.config import ADMIN_COOKIE_NAME
from codearena.database import (
    create_account,
    delete_account,
    delete_challenge,
    get_account,
    get_account_by_email,
    get_challenge,
    list_admin_challenges,
    serialize_mongo,
    update_account,
)
from codearena.dependencies import get_current_admin_id, get_db
from codearena.models import AccountCreate, AccountLogin, AccountUpdate

router = APIRouter(prefix="/admin", tags=["Admins"])


def public_admin(admin: dict) -> dict:
    return {
        "admin_id": admin["admin_id"],
        "username": admin["username"],
        "email": admin["email"],
        "challenges_created": admin.get("challenges_created", []),
    }


@router.post("/register")
async def register_admin(data: AccountCreate, response: Response, db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        if await get_account_by_email(db, "admin", data.email):
            raise HTTPException(status_code=400, detail="Admin already exists")

        try:
            admin = await create_account(db, "admin", {
                "username": data.username,
                "email": data.email,
                "password": hash_password(data.password),
            })
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail="Admin already exists")

        token = issue_session(admin["admin_id"], "admin")
        set_session_cookie(response, ADMIN_COOKIE_NAME, token)

        return {
            "success": True,
            "message": "Admin registered successfully",
            "host": {**public_admin(admin), "token": token},
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to register Admin: {e}")


@router.post("/login")
async def login_admin(data: AccountLogin, response: Response, db: AsyncIOMotorDatabase = Depends(get_db)):
    try:
        admin = await verify_credentials(db, "admin", data.email, data.password)
        if not admin:
            raise HTTPException(status_code=401, detail="Invalid email or password")

        set_session_cookie(response, ADMIN_COOKIE_NAME, issue_session(admin["admin_id"], "admin"))

        return {
            "success": True,
            "message": f"Welcome Back, {admin['username']}",
            "host": public_admin(admin),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/logout")
async def logout_admin(response: Response, admin_id: str = Depends(get_current_admin_id)):
    clear_session_cookie(response, ADMIN_COOKIE_NAME)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/challenges")
async def get_admin_challenges(
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    """Challenges created by the logged-in admin"""
    challenges = await list_admin_challenges(db, admin_id)
    return {"success": True, "challenges": challenges}


@router.delete("/challenge/delete/{challenge_id}")
async def delete_challenge_from_admin(
    challenge_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    challenge = await get_challenge(db, challenge_id)
    if not challenge:
        raise HTTPException(status_code=404, detail="Challenge not found")
    if challenge["created_by"] != admin_id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this challenge")

    await delete_challenge(db, challenge_id, admin_id)
    admin = await get_account(db, "admin", admin_id)

    return {
        "success": True,
        "message": "Challenge deleted successfully",
        "host": public_admin(admin) if admin else None,
    }


@router.get("/profile")
async def get_admin_profile(
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    admin = await get_account(db, "admin", admin_id)
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")

    return {
        "success": True,
        "host": public_admin(admin),
        "message": f"Welcome Back, {admin['username']}",
    }


@router.put("/profile")
async def update_admin_profile(
    data: AccountUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    updates = {}
    if data.username:
        updates["username"] = data.username.strip()
    if data.email:
        owner = await get_account_by_email(db, "admin", data.email)
        if owner and owner["admin_id"] != admin_id:
            raise HTTPException(status_code=400, detail="Email already in use")
        updates["email"] = data.email
    if data.password:
        updates["password"] = hash_password(data.password)

    try:
        admin = await update_account(db, "admin", admin_id, updates)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already in use")
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")

    return {
        "success": True,
        "message": "Admin profile updated successfully",
        "host": public_admin(serialize_mongo(admin)),
    }


@router.delete("/profile")
async def delete_admin(
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin_id: str = Depends(get_current_admin_id)
):
    if not await delete_account(db, "admin", admin_id):
        raise HTTPException(status_code=404, detail="Admin not found")

    clear_session_cookie(response, ADMIN_COOKIE_NAME)
    return {"success": True, "message": "Admin removed"}
