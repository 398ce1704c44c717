from unittest.mock import MagicMock

import mysql.connector
import pytest

from exam_handlers.config import Settings
from exam_handlers.database import Database, ExamStore
from exam_handlers.errors import StoreFailure


@pytest.fixture
def cursor():
    return MagicMock()


@pytest.fixture
def conn(cursor):
    conn = MagicMock()
    conn.cursor.return_value = cursor
    return conn


@pytest.fixture
def db(conn):
    db = Database(Settings())
    db._pool = MagicMock()
    db._pool.get_connection.return_value = conn
    return db


def test_pool_is_not_created_at_construction():
    assert Database(Settings())._pool is None


def test_write_commits_and_returns_lastrowid(db, conn, cursor):
    cursor.lastrowid = 42

    result = db.execute_query("INSERT INTO quizzes (`code`) VALUES (%s)", ("X",))

    assert result == 42
    conn.commit.assert_called_once()
    cursor.close.assert_called_once()
    conn.close.assert_called_once()


def test_fetch_one_does_not_commit(db, conn, cursor):
    cursor.fetchone.return_value = {"total": 3}

    assert db.execute_query("SELECT 1", fetch_one=True) == {"total": 3}
    conn.commit.assert_not_called()


def test_driver_error_rolls_back_and_raises_store_failure(db, conn, cursor):
    cursor.execute.side_effect = mysql.connector.Error("lost connection")

    with pytest.raises(StoreFailure):
        db.execute_query("SELECT 1", fetch_one=True)

    conn.rollback.assert_called_once()
    conn.close.assert_called_once()


@pytest.mark.parametrize("rowcount,created", [(1, True), (2, False), (0, False)])
def test_upsert_reports_whether_row_was_inserted(db, cursor, rowcount, created):
    cursor.rowcount = rowcount

    assert db.execute_upsert("INSERT ... ON DUPLICATE KEY UPDATE", ()) is created


def test_transaction_commits_once_for_many_statements(db, conn, cursor):
    cursor.lastrowid = 5
    store = ExamStore(db)

    rows = store.insert_questions(9, [("a", "mcq"), ("b", "true_false")])

    assert [r["question_type"] for r in rows] == ["mcq", "true_false"]
    assert cursor.execute.call_count == 2
    conn.commit.assert_called_once()


def test_get_option_normalizes_tinyint(db, cursor):
    cursor.fetchone.return_value = {"option_id": 1, "question_id": 2, "option_text": "x", "is_correct": 1}

    option = ExamStore(db).get_option(1, 2)

    assert option["is_correct"] is True
    assert cursor.execute.call_args[0][1] == (1, 2)


def test_insert_quiz_quotes_column_names(db, cursor):
    cursor.lastrowid = 7

    quiz_id = ExamStore(db).insert_quiz({"class": "6A", "duration": 30})

    assert quiz_id == 7
    query, params = cursor.execute.call_args[0]
    assert "(`class`, `duration`)" in query
    assert params == ("6A", 30)


def test_insert_options_skips_empty_batch(db, conn):
    ExamStore(db).insert_options([])

    conn.cursor.assert_not_called()


def test_upsert_answer_normalizes_is_correct(db, cursor):
    cursor.rowcount = 1
    cursor.fetchone.return_value = {
        "answer_id": 3, "user_id": 1, "question_id": 2, "attempt_id": 9,
        "option_id": 5, "answer_text": None, "score": None, "is_correct": 1, "comment": None,
    }

    row, created = ExamStore(db).upsert_answer({
        "user_id": 1, "question_id": 2, "attempt_id": 9, "option_id": 5, "is_correct": True,
    })

    assert created is True
    assert row["is_correct"] is True
