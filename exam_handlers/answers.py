"""
Answer Recorder

Stores submitted answers by natural key (user, question, attempt) and then
recomputes the attempt tallies from the stored answers.
"""

from typing import Any, Dict, List, Tuple

from fastapi import Body, Depends, FastAPI
from pydantic import ValidationError

from .context import HandlerContext, get_context
from .database import ExamStore
from .errors import HandlerError, InvalidReference, ValidationFailed
from .log import get_logger
from .models import ANSWER_REQUIRED_FIELDS, AnswerIn, is_blank
from .responses import create_base_app, envelope, success

logger = get_logger(__name__)


# ==================== REQUEST PARSING ====================

def normalize_entries(payload: Any) -> List[Any]:
    """Accept {"answers": [...]}, a bare list, or a single answer object"""
    if isinstance(payload, list):
        entries = payload
    elif isinstance(payload, dict) and "answers" in payload:
        entries = payload["answers"]
        if not isinstance(entries, list):
            raise ValidationFailed("The 'answers' field must be a non-empty array.")
    elif isinstance(payload, dict):
        entries = [payload]
    else:
        raise ValidationFailed("The 'answers' field must be a non-empty array.")

    if not entries:
        raise ValidationFailed("The 'answers' field must be a non-empty array.")
    return entries


def parse_entries(entries: List[Any]) -> List[AnswerIn]:
    invalid = [
        e for e in entries
        if not isinstance(e, dict) or any(is_blank(e.get(f)) for f in ANSWER_REQUIRED_FIELDS)
    ]
    if invalid:
        raise ValidationFailed("Some answers are missing required fields.", details=invalid)

    try:
        return [AnswerIn.model_validate(e) for e in entries]
    except ValidationError as e:
        raise ValidationFailed("Some answers have invalid field values.", details=e.errors(include_url=False))


# ==================== RECORDING ====================

def record_answer(store: ExamStore, answer: AnswerIn) -> Dict:
    """Upsert one answer; correctness always comes from the referenced option"""
    option = store.get_option(answer.option_id, answer.question_id)
    if not option:
        raise InvalidReference(
            f"Invalid option_id or question_id for answer with question_id {answer.question_id}."
        )

    row, created = store.upsert_answer({
        "user_id": answer.user_id,
        "question_id": answer.question_id,
        "attempt_id": answer.attempt_id,
        "option_id": answer.option_id,
        "answer_text": answer.answer_text,
        "score": answer.score,
        "is_correct": bool(option["is_correct"]),
        "comment": answer.comment,
    })
    verb = "created" if created else "updated"
    return envelope(
        "success",
        f"Answer for question_id {answer.question_id} {verb} successfully.",
        data=row,
        action=verb,
    )


def recompute_attempt(store: ExamStore, attempt_id: int, user_id: int) -> Dict:
    """
    Rebuild right/false tallies for an attempt from its current answers and
    overwrite them on the attempt row
    """
    total = store.count_attempt_questions(attempt_id)
    answers = store.list_attempt_answers(attempt_id, user_id)

    correct = sum(1 for a in answers if a["is_correct"] is True)
    wrong = sum(1 for a in answers if a["is_correct"] is False)
    answered = len({a["question_id"] for a in answers})

    store.update_attempt_tallies(attempt_id, user_id, correct, wrong)

    return {
        "attempt_id": attempt_id,
        "user_id": user_id,
        "total_questions": total,
        "correct_answers": correct,
        "wrong_answers": wrong,
        "unanswered_questions": max(total - answered, 0),
    }


def record_answers(store: ExamStore, answers: List[AnswerIn]) -> Tuple[List[Dict], List[Dict]]:
    """Process every entry independently, then recompute each touched attempt"""
    results = []
    for answer in answers:
        # entries are not atomic: a failure here leaves earlier writes in place
        try:
            results.append(record_answer(store, answer))
        except HandlerError as e:
            logger.warning("Answer for question %s rejected: %s", answer.question_id, e.message)
            results.append(envelope("error", e.message, details=e.details, error_code=e.error_code))

    pairs = list(dict.fromkeys((a.attempt_id, a.user_id) for a in answers))
    tallies = [recompute_attempt(store, attempt_id, user_id) for attempt_id, user_id in pairs]
    return results, tallies


# ==================== APP ====================

def create_app(context: HandlerContext = None) -> FastAPI:
    app = create_base_app(
        title="Answer Recorder",
        description="Records submitted answers and recomputes attempt tallies",
    )
    app.state.context = context

    @app.post("/")
    def submit_answers(payload: Any = Body(...), ctx: HandlerContext = Depends(get_context)):
        """
        Record one or many answers

        - Validates required fields on every entry
        - Upserts each answer independently
        - Recomputes right/false tallies of the touched attempts
        """
        answers = parse_entries(normalize_entries(payload))
        results, tallies = record_answers(ctx.store, answers)

        data = dict(tallies[0])
        data["attempts"] = tallies
        return success(data=data, results=results)

    return app
