import json

import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from codearena.database import create_indexes
from codearena.dependencies import get_db, get_execution_client
from codearena.execution.client import ExecutionClient
from codearena.main import app


# ==================== IN-MEMORY MOTOR STAND-IN ====================
# mongomock is synchronous; these wrappers expose the awaitable surface of
# motor that codearena.database uses.

class AsyncCursor:
    def __init__(self, cursor):
        self._cursor = cursor

    def sort(self, *args, **kwargs):
        self._cursor = self._cursor.sort(*args, **kwargs)
        return self

    def skip(self, count):
        self._cursor = self._cursor.skip(count)
        return self

    def limit(self, count):
        self._cursor = self._cursor.limit(count)
        return self

    async def to_list(self, length=None):
        docs = list(self._cursor)
        return docs if length is None else docs[:length]


class AsyncCollection:
    def __init__(self, collection):
        self._collection = collection

    def find(self, *args, **kwargs):
        return AsyncCursor(self._collection.find(*args, **kwargs))

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        method = getattr(self._collection, name)

        async def call(*args, **kwargs):
            return method(*args, **kwargs)

        return call


class AsyncDatabase:
    def __init__(self, database):
        self._database = database
        self._collections = {}

    def __getitem__(self, name):
        if name not in self._collections:
            self._collections[name] = AsyncCollection(self._database[name])
        return self._collections[name]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]


def run_sync(coro):
    """Drive a coroutine that never suspends (everything here is in-memory)."""
    try:
        coro.send(None)
    except StopIteration as stop:
        return stop.value
    coro.close()
    raise RuntimeError("coroutine suspended on a real await")


# ==================== FAKE EXECUTION SERVICE ====================

def piston_run(stdout="", stderr="", code=0, signal=None, compile_stage=None):
    body = {
        "language": "python",
        "version": "3.10.0",
        "run": {
            "stdout": stdout,
            "stderr": stderr,
            "code": code,
            "signal": signal,
            "output": stdout + stderr,
        },
    }
    if compile_stage is not None:
        body["compile"] = compile_stage
    return body


class FakeExecutionService:
    """Records every /execute call. By default the program echoes its stdin."""

    def __init__(self):
        self.calls = []
        self.responder = lambda payload: piston_run(stdout=payload["stdin"])

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.calls.append(payload)
        result = self.responder(payload)
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)

    def client(self) -> ExecutionClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return ExecutionClient(http_client, base_url="http://piston.test/api/v2")


# ==================== FIXTURES ====================

@pytest.fixture
def db():
    database = AsyncDatabase(mongomock.MongoClient()["codearena_test"])
    run_sync(create_indexes(database))
    return database


@pytest.fixture
def execution_service():
    return FakeExecutionService()


@pytest.fixture
def execution_client(execution_service):
    return execution_service.client()


@pytest.fixture
def client(db, execution_client):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_execution_client] = lambda: execution_client
    # Not used as a context manager: startup would connect to a real MongoDB
    yield TestClient(app)
    app.dependency_overrides.clear()


# ==================== API HELPERS ====================

def register_admin(client, email="host@example.com"):
    response = client.post("/admin/register", json={
        "username": "host",
        "email": email,
        "password": "secret123",
    })
    assert response.status_code == 200, response.text
    return response.json()["host"]


def register_user(client, email="coder@example.com"):
    response = client.post("/user/register", json={
        "username": "coder",
        "email": email,
        "password": "secret123",
    })
    assert response.status_code == 200, response.text
    return response.json()["user"]


@pytest.fixture
def seeded_question(client):
    """Admin-owned challenge with one question (max_score 50) and two echo test cases."""
    register_admin(client)
    challenge = client.post("/challenge", json={
        "title": "Warmup",
        "description": "Easy ones",
    }).json()["challenge"]
    question = client.post("/question", json={
        "challenge_id": challenge["challenge_id"],
        "title": "Echo",
        "description": "Print the input",
        "max_score": 50,
    }).json()["question"]
    for value in ("5", "hello"):
        response = client.post("/testCase", json={
            "question_id": question["question_id"],
            "input": value,
            "output": value,
        })
        assert response.status_code == 201, response.text

    return {"challenge": challenge, "question": question}
