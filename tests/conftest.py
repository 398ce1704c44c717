import itertools
import json

import pytest
from fastapi.testclient import TestClient

from exam_handlers import answers, comments, documents, exams, results
from exam_handlers.config import Settings
from exam_handlers.context import HandlerContext
from exam_handlers.genexam import GenExamClient, WorkflowClient


# ==================== FAKES ====================

class FakeStore:
    """In-memory stand-in for ExamStore with the same natural-key semantics"""

    def __init__(self):
        self._ids = itertools.count(1)
        self.users = {}
        self.subjects = {}
        self.quizzes = {}
        self.questions = {}
        self.options = {}
        self.attempts = {}
        self.answers = {}
        self.comments = {}
        self.option_queries = 0

    # ---------- seeding ----------

    def add_user(self, username):
        user_id = next(self._ids)
        self.users[user_id] = username
        return user_id

    def add_subject(self, name):
        subject_id = next(self._ids)
        self.subjects[subject_id] = name
        return subject_id

    def add_quiz(self, created_by, subject_id, duration=30):
        return self.insert_quiz({"created_by": created_by, "subject_id": subject_id, "duration": duration})

    def add_question(self, quiz_id, text, question_type="mcq"):
        return self.insert_questions(quiz_id, [(text, question_type)])[0]["question_id"]

    def add_option(self, question_id, text, is_correct, option_id=None):
        option_id = option_id or next(self._ids)
        self.options[option_id] = {
            "option_id": option_id,
            "question_id": question_id,
            "option_text": text,
            "is_correct": is_correct,
        }
        return option_id

    def add_attempt(self, user_id, quiz_id, attempt_id=None):
        attempt_id = attempt_id or next(self._ids)
        self.attempts[attempt_id] = {
            "attempt_id": attempt_id,
            "user_id": user_id,
            "quiz_id": quiz_id,
            "right_answers": 0,
            "false_answers": 0,
        }
        return attempt_id

    # ---------- ExamStore interface ----------

    def get_option(self, option_id, question_id):
        option = self.options.get(option_id)
        if option and option["question_id"] == question_id:
            return dict(option)
        return None

    def upsert_answer(self, answer):
        key = (answer["user_id"], answer["question_id"], answer["attempt_id"])
        existing = self.answers.get(key)
        row = dict(answer, answer_id=existing["answer_id"] if existing else next(self._ids))
        self.answers[key] = row
        return dict(row), existing is None

    def list_attempt_answers(self, attempt_id, user_id):
        return [
            {"question_id": a["question_id"], "is_correct": a["is_correct"]}
            for a in self.answers.values()
            if a["attempt_id"] == attempt_id and a["user_id"] == user_id
        ]

    def count_attempt_questions(self, attempt_id):
        attempt = self.attempts.get(attempt_id)
        if not attempt:
            return 0
        return self.count_quiz_questions(attempt["quiz_id"])

    def update_attempt_tallies(self, attempt_id, user_id, right_answers, false_answers):
        attempt = self.attempts.get(attempt_id)
        if attempt and attempt["user_id"] == user_id:
            attempt["right_answers"] = right_answers
            attempt["false_answers"] = false_answers

    def upsert_comment(self, question_id, attempt_id, student_id, comment_text):
        key = (question_id, attempt_id, student_id)
        existing = self.comments.get(key)
        row = {
            "comment_id": existing["comment_id"] if existing else next(self._ids),
            "question_id": question_id,
            "attempt_id": attempt_id,
            "student_id": student_id,
            "comment_text": comment_text,
        }
        self.comments[key] = row
        return dict(row), existing is None

    def find_comments(self, question_id, attempt_id, student_id):
        row = self.comments.get((question_id, attempt_id, student_id))
        return [dict(row)] if row else []

    def count_quiz_questions(self, quiz_id):
        return sum(1 for q in self.questions.values() if q["quiz_id"] == quiz_id)

    def insert_quiz(self, quiz):
        quiz_id = next(self._ids)
        self.quizzes[quiz_id] = dict(quiz, quiz_id=quiz_id)
        return quiz_id

    def insert_questions(self, quiz_id, questions):
        inserted = []
        for text, question_type in questions:
            question_id = next(self._ids)
            row = {
                "question_id": question_id,
                "quiz_id": quiz_id,
                "question_text": text,
                "question_type": question_type,
            }
            self.questions[question_id] = row
            inserted.append(dict(row))
        return inserted

    def insert_options(self, options):
        for o in options:
            self.add_option(o["question_id"], o["option_text"], o["is_correct"])

    def get_quiz(self, quiz_id):
        quiz = self.quizzes.get(quiz_id)
        return dict(quiz) if quiz else None

    def get_username(self, user_id):
        return self.users.get(user_id)

    def get_subject_name(self, subject_id):
        return self.subjects.get(subject_id)

    def list_questions(self, quiz_id):
        return [dict(q) for q in self.questions.values() if q["quiz_id"] == quiz_id]

    def list_options(self, question_id):
        self.option_queries += 1
        return [dict(o) for o in self.options.values() if o["question_id"] == question_id]


class FakeStorage:
    def __init__(self, base_url="https://files.example.com/exam-pdfs"):
        self.base_url = base_url
        self.objects = {}
        self.uploads = 0

    def exists(self, key):
        return key in self.objects

    def upload(self, key, body, content_type=None):
        self.uploads += 1
        self.objects[key] = (body, content_type)

    def public_url(self, key):
        return f"{self.base_url}/{key}"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    """Records outbound calls and replays queued responses"""

    def __init__(self):
        self.post_responses = []
        self.get_responses = []
        self.posts = []
        self.gets = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.posts.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return self.post_responses.pop(0)

    def get(self, url, params=None, timeout=None):
        self.gets.append({"url": url, "params": params, "timeout": timeout})
        return self.get_responses.pop(0)


# ==================== FIXTURES ====================

@pytest.fixture
def settings():
    return Settings(
        genexam_api_key="en-key",
        genexam_api_key_ar="ar-key",
        workflow_key="wf-key",
        http_timeout_seconds=5,
    )


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def ctx(settings, store, storage, session):
    return HandlerContext(
        settings=settings,
        store=store,
        storage=storage,
        genexam=GenExamClient(settings, session=session),
        workflow=WorkflowClient(settings, session=session),
    )


@pytest.fixture
def answers_client(ctx):
    return TestClient(answers.create_app(ctx))


@pytest.fixture
def comments_client(ctx):
    return TestClient(comments.create_app(ctx))


@pytest.fixture
def results_client(ctx):
    return TestClient(results.create_app(ctx))


@pytest.fixture
def exams_client(ctx):
    return TestClient(exams.create_app(ctx))


@pytest.fixture
def documents_client(ctx):
    return TestClient(documents.create_app(ctx))
