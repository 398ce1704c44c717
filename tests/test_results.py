import pytest

from exam_handlers.errors import StoreFailure


@pytest.fixture
def attempt(store):
    quiz_id = store.add_quiz(store.add_user("instructor"), store.add_subject("Math"))
    questions = [store.add_question(quiz_id, f"Q{i}") for i in range(4)]
    attempt_id = store.add_attempt(user_id=2, quiz_id=quiz_id)
    for question_id, is_correct in zip(questions, [True, True, False]):
        store.upsert_answer({
            "user_id": 2, "question_id": question_id, "attempt_id": attempt_id,
            "option_id": 1, "is_correct": is_correct,
        })
    return {"quiz_id": quiz_id, "attempt_id": attempt_id}


def test_counts_correct_wrong_and_unanswered(results_client, attempt):
    res = results_client.post("/", json={"user_id": 2, **attempt})

    assert res.status_code == 200
    assert res.json() == {
        "status": "success",
        "data": {
            "total_questions": 4,
            "correct_answers": 2,
            "wrong_answers": 1,
            "unanswered_questions": 1,
        },
    }


def test_does_not_touch_attempt_tallies(results_client, store, attempt):
    results_client.post("/", json={"user_id": 2, **attempt})

    stored = store.attempts[attempt["attempt_id"]]
    assert (stored["right_answers"], stored["false_answers"]) == (0, 0)


def test_other_users_answers_are_ignored(results_client, attempt):
    res = results_client.post("/", json={"user_id": 99, **attempt})

    assert res.json()["data"]["unanswered_questions"] == 4


def test_missing_parameters(results_client):
    res = results_client.post("/", json={"user_id": 2, "quiz_id": 1})

    assert res.status_code == 400
    assert res.json()["message"] == "Missing required parameters: user_id, quiz_id, attempt_id"


def test_store_failure_is_500(results_client, store, monkeypatch):
    def broken(quiz_id):
        raise StoreFailure("Database error: connection lost")

    monkeypatch.setattr(store, "count_quiz_questions", broken)

    res = results_client.post("/", json={"user_id": 2, "quiz_id": 1, "attempt_id": 1})

    assert res.status_code == 500
    assert res.json()["error_code"] == "STORE_FAILURE"


def test_unexpected_error_is_generic_500(results_client, store, monkeypatch):
    def boom(quiz_id):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(store, "count_quiz_questions", boom)

    res = results_client.post("/", json={"user_id": 2, "quiz_id": 1, "attempt_id": 1})

    assert res.status_code == 500
    body = res.json()
    assert body["message"] == "An unexpected error occurred."
    assert body["details"] == "kaboom"
