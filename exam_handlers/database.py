from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import mysql.connector
from mysql.connector import pooling

from .config import Settings
from .errors import StoreFailure
from .log import get_logger

logger = get_logger(__name__)

# ON DUPLICATE KEY UPDATE reports 1 affected row for an insert and 2 for an update
_UPSERT_INSERTED = 1


# ==================== DATABASE UTILITIES ====================

class Database:
    """Pooled MySQL access. The pool is created on first use."""

    def __init__(self, settings: Settings, pool_name: str = "exam_pool"):
        self._config = {
            "host": settings.db_host,
            "port": settings.db_port,
            "user": settings.db_user,
            "password": settings.db_password,
            "database": settings.db_name,
            "pool_name": pool_name,
            "pool_size": settings.db_pool_size,
            "pool_reset_session": True,
        }
        self._pool = None

    def get_connection(self):
        """Get database connection from pool"""
        if self._pool is None:
            try:
                self._pool = pooling.MySQLConnectionPool(**self._config)
            except mysql.connector.Error as err:
                logger.error("Could not create connection pool: %s", err)
                raise StoreFailure(f"Database error: {err}")
        return self._pool.get_connection()

    def execute_query(self, query: str, params: tuple = None, fetch_one: bool = False, fetch_all: bool = False):
        """Execute a single statement; writes are committed and return lastrowid"""
        conn = self.get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(query, params or ())

            if fetch_one:
                result = cursor.fetchone()
            elif fetch_all:
                result = cursor.fetchall()
            else:
                conn.commit()
                result = cursor.lastrowid

            return result
        except mysql.connector.Error as err:
            conn.rollback()
            logger.error("Query failed: %s", err)
            raise StoreFailure(f"Database error: {err}")
        finally:
            cursor.close()
            conn.close()

    def execute_upsert(self, query: str, params: tuple) -> bool:
        """Run an INSERT ... ON DUPLICATE KEY UPDATE; True when a row was inserted"""
        conn = self.get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(query, params)
            conn.commit()
            return cursor.rowcount == _UPSERT_INSERTED
        except mysql.connector.Error as err:
            conn.rollback()
            logger.error("Upsert failed: %s", err)
            raise StoreFailure(f"Database error: {err}")
        finally:
            cursor.close()
            conn.close()

    @contextmanager
    def transaction(self):
        """Cursor whose statements are committed together"""
        conn = self.get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            yield cursor
            conn.commit()
        except mysql.connector.Error as err:
            conn.rollback()
            logger.error("Transaction failed: %s", err)
            raise StoreFailure(f"Database error: {err}")
        finally:
            cursor.close()
            conn.close()


# ==================== EXAM STORE ====================

class ExamStore:
    """Queries the handlers run against the exam schema (see schema.sql)"""

    def __init__(self, db: Database):
        self.db = db

    # ---------- options / answers ----------

    def get_option(self, option_id: int, question_id: int) -> Optional[Dict]:
        row = self.db.execute_query(
            """
            SELECT option_id, question_id, option_text, is_correct
            FROM options
            WHERE option_id = %s AND question_id = %s
            """,
            (option_id, question_id),
            fetch_one=True
        )
        return _with_bool(row, "is_correct") if row else None

    def upsert_answer(self, answer: Dict[str, Any]) -> Tuple[Dict, bool]:
        created = self.db.execute_upsert(
            """
            INSERT INTO answers
            (user_id, question_id, attempt_id, option_id, answer_text, score, is_correct, comment)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE
                option_id = VALUES(option_id),
                answer_text = VALUES(answer_text),
                score = VALUES(score),
                is_correct = VALUES(is_correct),
                comment = VALUES(comment)
            """,
            (
                answer["user_id"],
                answer["question_id"],
                answer["attempt_id"],
                answer["option_id"],
                answer.get("answer_text"),
                answer.get("score"),
                answer["is_correct"],
                answer.get("comment"),
            )
        )
        row = self.db.execute_query(
            """
            SELECT answer_id, user_id, question_id, attempt_id, option_id,
                   answer_text, score, is_correct, comment
            FROM answers
            WHERE user_id = %s AND question_id = %s AND attempt_id = %s
            """,
            (answer["user_id"], answer["question_id"], answer["attempt_id"]),
            fetch_one=True
        )
        return (_with_bool(row, "is_correct") if row else row), created

    def list_attempt_answers(self, attempt_id: int, user_id: int) -> List[Dict]:
        rows = self.db.execute_query(
            """
            SELECT question_id, is_correct
            FROM answers
            WHERE attempt_id = %s AND user_id = %s
            """,
            (attempt_id, user_id),
            fetch_all=True
        )
        return [_with_bool(r, "is_correct") for r in rows]

    # ---------- attempts ----------

    def count_attempt_questions(self, attempt_id: int) -> int:
        """Number of questions in the quiz the attempt belongs to"""
        row = self.db.execute_query(
            """
            SELECT COUNT(q.question_id) AS total
            FROM attempts a
            JOIN questions q ON q.quiz_id = a.quiz_id
            WHERE a.attempt_id = %s
            """,
            (attempt_id,),
            fetch_one=True
        )
        return int(row["total"]) if row else 0

    def update_attempt_tallies(self, attempt_id: int, user_id: int, right_answers: int, false_answers: int) -> None:
        self.db.execute_query(
            """
            UPDATE attempts
            SET right_answers = %s, false_answers = %s
            WHERE attempt_id = %s AND user_id = %s
            """,
            (right_answers, false_answers, attempt_id, user_id)
        )

    # ---------- comments ----------

    def upsert_comment(self, question_id: int, attempt_id: int, student_id: int, comment_text: str) -> Tuple[Dict, bool]:
        created = self.db.execute_upsert(
            """
            INSERT INTO answers_comment (question_id, attempt_id, student_id, comment_text)
            VALUES (%s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE comment_text = VALUES(comment_text)
            """,
            (question_id, attempt_id, student_id, comment_text)
        )
        rows = self.find_comments(question_id, attempt_id, student_id)
        return (rows[0] if rows else None), created

    def find_comments(self, question_id: int, attempt_id: int, student_id: int) -> List[Dict]:
        return self.db.execute_query(
            """
            SELECT comment_id, question_id, attempt_id, student_id, comment_text, created_at
            FROM answers_comment
            WHERE question_id = %s AND attempt_id = %s AND student_id = %s
            """,
            (question_id, attempt_id, student_id),
            fetch_all=True
        )

    # ---------- quizzes / questions ----------

    def count_quiz_questions(self, quiz_id: int) -> int:
        row = self.db.execute_query(
            "SELECT COUNT(*) AS total FROM questions WHERE quiz_id = %s",
            (quiz_id,),
            fetch_one=True
        )
        return int(row["total"]) if row else 0

    def insert_quiz(self, quiz: Dict[str, Any]) -> int:
        columns = list(quiz.keys())
        query = "INSERT INTO quizzes ({}) VALUES ({})".format(
            ", ".join(f"`{c}`" for c in columns),
            ", ".join(["%s"] * len(columns)),
        )
        return self.db.execute_query(query, tuple(quiz[c] for c in columns))

    def insert_questions(self, quiz_id: int, questions: Iterable[Tuple[str, str]]) -> List[Dict]:
        """Insert (question_text, question_type) pairs in order and return the new rows"""
        inserted = []
        with self.db.transaction() as cursor:
            for text, question_type in questions:
                cursor.execute(
                    "INSERT INTO questions (quiz_id, question_text, question_type) VALUES (%s, %s, %s)",
                    (quiz_id, text, question_type)
                )
                inserted.append({
                    "question_id": cursor.lastrowid,
                    "quiz_id": quiz_id,
                    "question_text": text,
                    "question_type": question_type,
                })
        return inserted

    def insert_options(self, options: Sequence[Dict[str, Any]]) -> None:
        if not options:
            return
        with self.db.transaction() as cursor:
            cursor.executemany(
                "INSERT INTO options (question_id, option_text, is_correct) VALUES (%s, %s, %s)",
                [(o["question_id"], o["option_text"], o["is_correct"]) for o in options]
            )

    # ---------- document data ----------

    def get_quiz(self, quiz_id: int) -> Optional[Dict]:
        return self.db.execute_query(
            "SELECT * FROM quizzes WHERE quiz_id = %s",
            (quiz_id,),
            fetch_one=True
        )

    def get_username(self, user_id: int) -> Optional[str]:
        row = self.db.execute_query(
            "SELECT username FROM users WHERE user_id = %s",
            (user_id,),
            fetch_one=True
        )
        return row["username"] if row else None

    def get_subject_name(self, subject_id: int) -> Optional[str]:
        row = self.db.execute_query(
            "SELECT subject_name FROM subjects WHERE subject_id = %s",
            (subject_id,),
            fetch_one=True
        )
        return row["subject_name"] if row else None

    def list_questions(self, quiz_id: int) -> List[Dict]:
        return self.db.execute_query(
            """
            SELECT question_id, quiz_id, question_text, question_type
            FROM questions
            WHERE quiz_id = %s
            ORDER BY question_id
            """,
            (quiz_id,),
            fetch_all=True
        )

    def list_options(self, question_id: int) -> List[Dict]:
        rows = self.db.execute_query(
            """
            SELECT option_id, question_id, option_text, is_correct
            FROM options
            WHERE question_id = %s
            ORDER BY option_id
            """,
            (question_id,),
            fetch_all=True
        )
        return [_with_bool(r, "is_correct") for r in rows]


def _with_bool(row: Dict, key: str) -> Dict:
    # TINYINT(1) columns come back as 0/1
    value = row.get(key)
    if value is not None:
        row = dict(row, **{key: bool(value)})
    return row
