from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from codearena.auth.security import decode_session
from codearena.database import get_account
from codearena.execution.client import ExecutionClient
from codearena.execution.engine import EvaluationEngine


def get_db_instance():
    """Get database from main module"""
    from codearena.main import db
    return db


# ==================== DEPENDENCY FUNCTIONS ====================

async def get_db() -> AsyncIOMotorDatabase:
    """Database dependency"""
    return get_db_instance()


async def get_current_user_id(
    user_jwt: Optional[str] = Cookie(None),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> str:
    """Resolve the logged-in user from the user_jwt cookie"""
    if not user_jwt:
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    user_id = decode_session(user_jwt, "user")
    if not await get_account(db, "user", user_id):
        raise HTTPException(status_code=401, detail="Not authorized, user not found")
    return user_id


async def get_current_admin_id(
    admin_jwt: Optional[str] = Cookie(None),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> str:
    """Resolve the logged-in admin from the admin_jwt cookie"""
    if not admin_jwt:
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    admin_id = decode_session(admin_jwt, "admin")
    if not await get_account(db, "admin", admin_id):
        raise HTTPException(status_code=401, detail="Not authorized, admin not found")
    return admin_id


def get_execution_client(request: Request) -> ExecutionClient:
    """Execution client created at startup"""
    return request.app.state.execution_client


def get_evaluation_engine(client: ExecutionClient = Depends(get_execution_client)) -> EvaluationEngine:
    return EvaluationEngine(client)
