from tests.conftest import register_user


def submit(client, seeded_question, **overrides):
    body = {
        "challenge_id": seeded_question["challenge"]["challenge_id"],
        "question_id": seeded_question["question"]["question_id"],
        "code": "import sys; print(sys.stdin.read())",
        "language": "python",
    }
    body.update(overrides)
    return client.post("/submission", json=body)


def test_submission_requires_login(client, seeded_question):
    client.cookies.clear()
    assert submit(client, seeded_question).status_code == 401


def test_passing_submission_awards_max_score(client, execution_service, seeded_question):
    register_user(client)

    response = submit(client, seeded_question)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "pass"
    assert body["awarded_score"] == {"awarded": 50}
    assert body["verdict"]["passed_count"] == 2
    assert body["submission"]["submission_id"].startswith("SUB_")
    assert len(execution_service.calls) == 2

    progress = client.get(f"/user/progress/{seeded_question['challenge']['challenge_id']}").json()["progress"]
    assert progress["score"] == 50
    assert progress["solved_questions"] == [seeded_question["question"]["question_id"]]


def test_resubmission_is_already_earned(client, seeded_question):
    register_user(client)
    submit(client, seeded_question)

    body = submit(client, seeded_question).json()

    assert body["status"] == "pass"
    assert body["awarded_score"] == {"already_earned": True}
    progress = client.get("/user/progress").json()["progress"]
    assert [p["score"] for p in progress] == [50]


def test_failed_submission_is_still_recorded(client, execution_service, seeded_question):
    register_user(client)
    execution_service.responder = lambda payload: {"run": {"stdout": "", "stderr": "SyntaxError", "code": 1}}

    response = submit(client, seeded_question)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "fail"
    assert body["awarded_score"] == {"awarded": 0}
    assert body["message"] == "Failed on test case 1: SyntaxError"
    assert len(execution_service.calls) == 1

    history = client.get(
        f"/submission/challenge/{seeded_question['challenge']['challenge_id']}"
        f"/question/{seeded_question['question']['question_id']}"
    )
    assert history.status_code == 200
    assert history.json()["submissions"][0]["status"] == "fail"
    assert client.get(f"/user/progress/{seeded_question['challenge']['challenge_id']}").status_code == 404


def test_unreachable_runner_fails_the_submission(client, execution_service, seeded_question):
    register_user(client)
    execution_service.responder = lambda payload: {"unexpected": True}

    body = submit(client, seeded_question).json()

    assert body["status"] == "fail"
    assert body["verdict"]["first_error"] == "Execution failed"


def test_missing_field_is_a_bad_request(client, execution_service, seeded_question):
    register_user(client)

    response = submit(client, seeded_question, code="")

    assert response.status_code == 400
    assert response.json()["detail"] == "All fields are required"
    assert execution_service.calls == []


def test_unknown_question_is_not_found(client, seeded_question):
    register_user(client)
    assert submit(client, seeded_question, question_id="Q_MISSING").status_code == 404


def test_submission_history_is_per_user(client, seeded_question):
    register_user(client)
    submit(client, seeded_question)
    assert client.get("/submission/user").json()["count"] == 1

    register_user(client, email="second@example.com")
    assert client.get("/submission/user").json()["count"] == 0
    empty = client.get(
        f"/submission/challenge/{seeded_question['challenge']['challenge_id']}"
        f"/question/{seeded_question['question']['question_id']}"
    )
    assert empty.status_code == 404


def test_admin_deletes_submission(client, seeded_question):
    register_user(client)
    submission_id = submit(client, seeded_question).json()["submission"]["submission_id"]

    client.post("/admin/login", json={"email": "host@example.com", "password": "secret123"})

    assert client.delete(f"/submission/{submission_id}").status_code == 200
    assert client.delete(f"/submission/{submission_id}").status_code == 404
