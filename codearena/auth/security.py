from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException, Response
from jose import JWTError, jwt
from motor.motor_asyncio import AsyncIOMotorDatabase
from passlib.context import CryptContext

from codearena.config import JWT_ALGORITHM, JWT_SECRET, SECURE_COOKIES, SESSION_MAX_AGE_DAYS
from codearena.database import get_account_by_email

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

SESSION_MAX_AGE_SECONDS = SESSION_MAX_AGE_DAYS * 24 * 60 * 60


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


async def verify_credentials(db: AsyncIOMotorDatabase, role: str, email: str, password: str) -> Optional[dict]:
    """Return the account for these credentials, or None if they do not match"""
    account = await get_account_by_email(db, role, email)
    if account and verify_password(password, account["password"]):
        return account
    return None


def issue_session(subject: str, role: str) -> str:
    """Signed session token for a user or admin id"""
    expire = datetime.utcnow() + timedelta(days=SESSION_MAX_AGE_DAYS)
    return jwt.encode({"sub": subject, "role": role, "exp": expire}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_session(token: str, role: str) -> str:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Not authorized, token failed")

    if payload.get("role") != role or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Not authorized, token failed")
    return payload["sub"]


def set_session_cookie(response: Response, cookie_name: str, token: str):
    response.set_cookie(
        key=cookie_name,
        value=token,
        httponly=True,
        secure=SECURE_COOKIES,
        samesite="strict",
        max_age=SESSION_MAX_AGE_SECONDS,
    )


def clear_session_cookie(response: Response, cookie_name: str):
    # Overwrite with an already-expired cookie
    response.set_cookie(
        key=cookie_name,
        value="",
        httponly=True,
        secure=SECURE_COOKIES,
        samesite="strict",
        max_age=0,
    )
