import uuid
from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

ACCOUNT_COLLECTIONS = {"user": "users", "admin": "admins"}
ACCOUNT_ID_FIELDS = {"user": "user_id", "admin": "admin_id"}
ACCOUNT_ID_PREFIXES = {"user": "USR", "admin": "ADM"}


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12].upper()}"


def serialize_mongo(doc: dict) -> dict:
    if doc and "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def serialize_many(docs: list[dict]) -> list[dict]:
    return [serialize_mongo(doc) for doc in docs]


# ==================== INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create MongoDB indexes (called on startup)"""
    await db.users.create_index("user_id", unique=True)
    await db.users.create_index("email", unique=True)
    await db.admins.create_index("admin_id", unique=True)
    await db.admins.create_index("email", unique=True)

    await db.challenges.create_index("challenge_id", unique=True)
    await db.challenges.create_index("created_by")

    await db.questions.create_index("question_id", unique=True)
    await db.questions.create_index("challenge_id")

    await db.test_cases.create_index("testcase_id", unique=True)
    await db.test_cases.create_index([("question_id", 1), ("position", 1)])

    await db.submissions.create_index("submission_id", unique=True)
    await db.submissions.create_index([("user_id", 1), ("challenge_id", 1), ("question_id", 1), ("status", 1)])
    await db.submissions.create_index("submitted_at")

    # One progress document per (user, challenge); the credit upsert relies on it
    await db.challenge_progress.create_index([("user_id", 1), ("challenge_id", 1)], unique=True)


# ==================== ACCOUNT CRUD ====================

async def create_account(db: AsyncIOMotorDatabase, role: str, data: dict) -> dict:
    """Create a user or admin account. Raises DuplicateKeyError on a taken email."""
    now = datetime.utcnow()
    account = {
        ACCOUNT_ID_FIELDS[role]: new_id(ACCOUNT_ID_PREFIXES[role]),
        "username": data["username"],
        "email": data["email"],
        "password": data["password"],
        "created_at": now,
        "updated_at": now,
    }
    if role == "user":
        account.update({"score": 0, "challenges_participated": []})
    else:
        account["challenges_created"] = []

    await db[ACCOUNT_COLLECTIONS[role]].insert_one(account)
    return serialize_mongo(account)


async def get_account(db: AsyncIOMotorDatabase, role: str, account_id: str) -> Optional[dict]:
    return await db[ACCOUNT_COLLECTIONS[role]].find_one({ACCOUNT_ID_FIELDS[role]: account_id})


async def get_account_by_email(db: AsyncIOMotorDatabase, role: str, email: str) -> Optional[dict]:
    return await db[ACCOUNT_COLLECTIONS[role]].find_one({"email": email})


async def update_account(db: AsyncIOMotorDatabase, role: str, account_id: str, updates: dict) -> Optional[dict]:
    updates["updated_at"] = datetime.utcnow()
    return await db[ACCOUNT_COLLECTIONS[role]].find_one_and_update(
        {ACCOUNT_ID_FIELDS[role]: account_id},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )


async def delete_account(db: AsyncIOMotorDatabase, role: str, account_id: str) -> bool:
    result = await db[ACCOUNT_COLLECTIONS[role]].delete_one({ACCOUNT_ID_FIELDS[role]: account_id})
    return result.deleted_count > 0


# ==================== CHALLENGE CRUD ====================

async def create_challenge(db: AsyncIOMotorDatabase, data: dict, admin_id: str) -> dict:
    challenge = {
        "challenge_id": new_id("CHL"),
        "title": data["title"],
        "description": data["description"],
        "difficulty": data.get("difficulty"),
        "created_by": admin_id,
        "questions": [],
        "participants": [],
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }
    await db.challenges.insert_one(challenge)

    await db.admins.update_one(
        {"admin_id": admin_id},
        {"$addToSet": {"challenges_created": challenge["challenge_id"]}}
    )
    return serialize_mongo(challenge)


async def get_challenge(db: AsyncIOMotorDatabase, challenge_id: str) -> Optional[dict]:
    return await db.challenges.find_one({"challenge_id": challenge_id})


async def list_challenges(db: AsyncIOMotorDatabase, skip: int = 0, limit: int = 20) -> List[dict]:
    cursor = db.challenges.find({}).sort("created_at", -1).skip(skip).limit(limit)
    return serialize_many(await cursor.to_list(length=limit))


async def list_admin_challenges(db: AsyncIOMotorDatabase, admin_id: str) -> List[dict]:
    """Challenges created by an admin, with their questions attached"""
    cursor = db.challenges.find({"created_by": admin_id}).sort("created_at", -1)
    challenges = await cursor.to_list(length=None)

    for challenge in challenges:
        q_cursor = db.questions.find({"challenge_id": challenge["challenge_id"]}, {"_id": 0})
        challenge["questions"] = await q_cursor.to_list(length=None)

    return serialize_many(challenges)


async def update_challenge(db: AsyncIOMotorDatabase, challenge_id: str, updates: dict) -> Optional[dict]:
    updates["updated_at"] = datetime.utcnow()
    return await db.challenges.find_one_and_update(
        {"challenge_id": challenge_id},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )


async def delete_challenge(db: AsyncIOMotorDatabase, challenge_id: str, admin_id: str) -> Optional[dict]:
    """Delete a challenge with its questions and test cases, and unlink it from the admin"""
    challenge = await db.challenges.find_one_and_delete({"challenge_id": challenge_id})
    if not challenge:
        return None

    question_ids = challenge.get("questions", [])
    if question_ids:
        await db.test_cases.delete_many({"question_id": {"$in": question_ids}})
    await db.questions.delete_many({"challenge_id": challenge_id})

    await db.admins.update_one(
        {"admin_id": admin_id},
        {"$pull": {"challenges_created": challenge_id}}
    )
    return challenge


async def join_challenge(db: AsyncIOMotorDatabase, challenge_id: str, user_id: str) -> Optional[dict]:
    challenge = await db.challenges.find_one_and_update(
        {"challenge_id": challenge_id},
        {"$addToSet": {"participants": user_id}},
        return_document=ReturnDocument.AFTER,
    )
    if not challenge:
        return None

    await db.users.update_one(
        {"user_id": user_id},
        {"$addToSet": {"challenges_participated": challenge_id}}
    )
    return challenge


# ==================== QUESTION CRUD ====================

async def create_question(db: AsyncIOMotorDatabase, data: dict) -> dict:
    question = {
        "question_id": new_id("Q"),
        "challenge_id": data["challenge_id"],
        "title": data["title"],
        "description": data["description"],
        "max_score": data.get("max_score", 100),
        "testcase_seq": 0,
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }
    await db.questions.insert_one(question)

    await db.challenges.update_one(
        {"challenge_id": data["challenge_id"]},
        {"$addToSet": {"questions": question["question_id"]}}
    )
    return serialize_mongo(question)


async def get_question(db: AsyncIOMotorDatabase, question_id: str) -> Optional[dict]:
    """Get question details"""
    return await db.questions.find_one({"question_id": question_id})


async def list_challenge_questions(db: AsyncIOMotorDatabase, challenge_id: str) -> List[dict]:
    cursor = db.questions.find({"challenge_id": challenge_id}).sort("created_at", 1)
    return serialize_many(await cursor.to_list(length=None))


async def update_question(db: AsyncIOMotorDatabase, question_id: str, updates: dict) -> Optional[dict]:
    updates["updated_at"] = datetime.utcnow()
    return await db.questions.find_one_and_update(
        {"question_id": question_id},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )


async def delete_question(db: AsyncIOMotorDatabase, question_id: str) -> Optional[dict]:
    question = await db.questions.find_one_and_delete({"question_id": question_id})
    if not question:
        return None

    await db.test_cases.delete_many({"question_id": question_id})
    await db.challenges.update_one(
        {"challenge_id": question["challenge_id"]},
        {"$pull": {"questions": question_id}}
    )
    return question


# ==================== TEST CASE CRUD ====================

async def create_test_case(db: AsyncIOMotorDatabase, data: dict) -> Optional[dict]:
    """Append a test case to a question. Returns None if the question is gone."""
    # Atomic counter on the question keeps positions unique and ordered
    question = await db.questions.find_one_and_update(
        {"question_id": data["question_id"]},
        {"$inc": {"testcase_seq": 1}},
        return_document=ReturnDocument.AFTER,
    )
    if not question:
        return None

    test_case = {
        "testcase_id": new_id("TC"),
        "question_id": data["question_id"],
        "input": data.get("input", ""),
        "output": data["output"],
        "position": question["testcase_seq"],
        "created_at": datetime.utcnow(),
    }
    await db.test_cases.insert_one(test_case)
    return serialize_mongo(test_case)


async def list_test_cases(db: AsyncIOMotorDatabase, question_id: str) -> List[dict]:
    """Test cases of a question in execution order"""
    cursor = db.test_cases.find({"question_id": question_id}).sort([("position", 1), ("testcase_id", 1)])
    return serialize_many(await cursor.to_list(length=None))


async def get_test_case(db: AsyncIOMotorDatabase, testcase_id: str) -> Optional[dict]:
    return await db.test_cases.find_one({"testcase_id": testcase_id})


async def delete_test_case(db: AsyncIOMotorDatabase, testcase_id: str) -> bool:
    result = await db.test_cases.delete_one({"testcase_id": testcase_id})
    return result.deleted_count > 0


# ==================== SUBMISSION CRUD ====================

async def create_submission(db: AsyncIOMotorDatabase, submission_data: dict) -> dict:
    """Create submission record"""
    submission = {
        "submission_id": new_id("SUB"),
        "user_id": submission_data["user_id"],
        "challenge_id": submission_data["challenge_id"],
        "question_id": submission_data["question_id"],
        "code": submission_data["code"],
        "language": submission_data["language"],
        "status": submission_data["status"],
        "score": submission_data["score"],
        "passed_count": submission_data.get("passed_count", 0),
        "total_count": submission_data.get("total_count", 0),
        "error": submission_data.get("error"),
        "results": submission_data.get("results", []),
        "submitted_at": datetime.utcnow(),
    }

    await db.submissions.insert_one(submission)
    return serialize_mongo(submission)


async def find_passing_submission(
    db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, question_id: str
) -> Optional[dict]:
    return await db.submissions.find_one({
        "user_id": user_id,
        "challenge_id": challenge_id,
        "question_id": question_id,
        "status": "pass",
    })


async def get_submission(db: AsyncIOMotorDatabase, submission_id: str) -> Optional[dict]:
    """Get submission by ID"""
    return await db.submissions.find_one({"submission_id": submission_id})


async def list_user_submissions(db: AsyncIOMotorDatabase, user_id: str, limit: int = 100) -> List[dict]:
    cursor = db.submissions.find({"user_id": user_id}).sort("submitted_at", -1).limit(limit)
    return serialize_many(await cursor.to_list(length=limit))


async def list_question_submissions(
    db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, question_id: str
) -> List[dict]:
    cursor = db.submissions.find({
        "user_id": user_id,
        "challenge_id": challenge_id,
        "question_id": question_id,
    }).sort("submitted_at", -1)
    return serialize_many(await cursor.to_list(length=None))


async def delete_submission(db: AsyncIOMotorDatabase, submission_id: str) -> bool:
    result = await db.submissions.delete_one({"submission_id": submission_id})
    return result.deleted_count > 0


# ==================== PROGRESS OPERATIONS ====================

async def credit_progress(
    db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, question_id: str, points: int
) -> Optional[dict]:
    """
    Add a solved question to (user, challenge) progress and increment its score.

    Single conditional upsert: the filter only matches while the question is
    not yet in `solved_questions`. If it already is, the upsert collides with
    the unique (user_id, challenge_id) index and nothing is credited.

    Returns the updated progress document, or None when already credited.
    """
    try:
        return await db.challenge_progress.find_one_and_update(
            {
                "user_id": user_id,
                "challenge_id": challenge_id,
                "solved_questions": {"$ne": question_id},
            },
            {
                "$addToSet": {"solved_questions": question_id},
                "$inc": {"score": points},
                "$set": {"last_updated": datetime.utcnow()},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        return None


async def get_progress(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str) -> Optional[dict]:
    return await db.challenge_progress.find_one({"user_id": user_id, "challenge_id": challenge_id})


async def list_user_progress(db: AsyncIOMotorDatabase, user_id: str) -> List[dict]:
    cursor = db.challenge_progress.find({"user_id": user_id}).sort("last_updated", -1)
    return serialize_many(await cursor.to_list(length=None))
