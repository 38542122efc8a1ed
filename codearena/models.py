import re
from typing import List, Optional

from pydantic import BaseModel, validator

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 6


def _check_email(v: str) -> str:
    v = v.strip().lower()
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Please use a valid email address")
    return v


def _check_password(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return v


# ==================== ACCOUNT MODELS ====================

class AccountCreate(BaseModel):
    username: str
    email: str
    password: str

    @validator("username")
    def validate_username(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @validator("email")
    def validate_email(cls, v):
        return _check_email(v)

    @validator("password")
    def validate_password(cls, v):
        return _check_password(v)


class AccountLogin(BaseModel):
    email: str
    password: str

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()


class AccountUpdate(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @validator("email")
    def validate_email(cls, v):
        return _check_email(v) if v else v

    @validator("password")
    def validate_password(cls, v):
        return _check_password(v) if v else v


# ==================== CHALLENGE MODELS ====================

class ChallengeCreate(BaseModel):
    title: str
    description: str
    difficulty: Optional[str] = None


class ChallengeUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    difficulty: Optional[str] = None


# ==================== QUESTION MODELS ====================

class QuestionCreate(BaseModel):
    challenge_id: str
    title: str
    description: str
    max_score: int = 100

    @validator("max_score")
    def validate_max_score(cls, v):
        if v < 0:
            raise ValueError("max_score cannot be negative")
        return v


class QuestionUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    max_score: Optional[int] = None

    @validator("max_score")
    def validate_max_score(cls, v):
        if v is not None and v < 0:
            raise ValueError("max_score cannot be negative")
        return v


class TestCaseCreate(BaseModel):
    question_id: str
    input: str = ""
    output: str


# ==================== SUBMISSION MODELS ====================

class SubmissionCreate(BaseModel):
    # Presence is checked by the submission service so a missing field is
    # reported as "All fields are required" rather than a schema error.
    challenge_id: Optional[str] = None
    question_id: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None


# ==================== EVALUATION MODELS ====================

class RemoteRun(BaseModel):
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0


class EvaluationResult(BaseModel):
    input: str
    expected_output: str
    actual_output: str
    error: Optional[str] = None
    passed: bool


class AggregateVerdict(BaseModel):
    total_count: int
    passed_count: int
    first_error: Optional[str] = None
    results: List[EvaluationResult] = []
    all_passed: bool


class AwardedScore(BaseModel):
    """Points granted by one submission.

    Either a number of points, or a marker that the question was already
    solved by this user and nothing new is awarded.
    """
    awarded: Optional[int] = None
    already_earned: bool = False

    @classmethod
    def points(cls, value: int) -> "AwardedScore":
        return cls(awarded=value)

    @classmethod
    def previously_earned(cls) -> "AwardedScore":
        return cls(already_earned=True)

    def to_document(self) -> dict:
        if self.already_earned:
            return {"already_earned": True}
        return {"awarded": self.awarded}


class ScoreOutcome(BaseModel):
    status: str  # pass, fail
    awarded_score: AwardedScore
    submission: dict
    progress: Optional[dict] = None
