import logging
import time
from uuid import uuid4

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse
from motor.motor_asyncio import AsyncIOMotorClient

from codearena.auth.admin_router import router as admin_router
from codearena.auth.user_router import router as user_router
from codearena.challenges.challenge_router import router as challenge_router
from codearena.challenges.question_router import router as question_router
from codearena.challenges.testcase_router import router as testcase_router
from codearena.config import CLIENT_URL, MONGO_DB_NAME, MONGO_URL
from codearena.database import create_indexes
from codearena.execution.client import ExecutionClient
from codearena.logging_config import setup_logging
from codearena.submissions.submission_router import router as submission_router

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="CodeArena API")
STARTED_AT = time.monotonic()

# MongoDB Configuration
client = AsyncIOMotorClient(MONGO_URL)
db = client[MONGO_DB_NAME]


@app.on_event("startup")
async def startup_event():
    await create_indexes(db)
    app.state.execution_client = ExecutionClient(httpx.AsyncClient())
    logger.info("startup_complete", extra={"stage": "startup"})


@app.on_event("shutdown")
async def shutdown_event():
    execution_client = getattr(app.state, "execution_client", None)
    if execution_client is not None:
        await execution_client.http_client.aclose()
    client.close()


app.add_middleware(
    CORSMiddleware,
    allow_origins=[CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    request_logger = logging.getLogger("request")
    start = time.perf_counter()
    extra = {
        "request_id": str(uuid4()),
        "method": request.method,
        "path": request.url.path,
        "client": request.client.host if request.client else "-",
    }

    try:
        response = await call_next(request)
    except Exception:
        extra.update(status_code=500, duration_ms=int((time.perf_counter() - start) * 1000))
        request_logger.exception("request_failed", extra=extra)
        raise

    extra.update(status_code=response.status_code, duration_ms=int((time.perf_counter() - start) * 1000))
    request_logger.info("request_completed", extra=extra)
    return response


# ==================== ROUTER REGISTRATION ====================
app.include_router(user_router)
app.include_router(admin_router)
app.include_router(challenge_router)
app.include_router(question_router)
app.include_router(testcase_router)
app.include_router(submission_router)
# ============================================================


@app.get("/health")
async def health_check():
    return {"status": "OK", "uptime": time.monotonic() - STARTED_AT}


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Welcome to the CodeArena API"
