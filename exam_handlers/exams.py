"""
Exam Orchestrator

validate -> create quiz -> call the exam-authoring API -> persist questions
and options -> notify the completion workflow.

Nothing is rolled back: a failure after the quiz insert leaves the quiz (and
whatever was stored before the failing step) in place.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

from fastapi import Depends, FastAPI

from .context import HandlerContext, get_context
from .errors import UpstreamFailure, ValidationFailed
from .log import get_logger
from .models import ExamMode, ExamRequest, ExamRequestV2, Language, QuestionType
from .responses import create_base_app, success

logger = get_logger(__name__)

SUCCESS_MESSAGE = "Quiz, questions, options inserted, and exam status updated successfully"


# ==================== VALIDATION ====================

def sanitize_chapters(chapter: Any) -> List[str]:
    """Trim chapter names and drop empty ones; at least one must remain"""
    if isinstance(chapter, str):
        items = [chapter]
    elif isinstance(chapter, (list, tuple)):
        items = chapter
    else:
        items = []

    chapters = [str(c).strip() for c in items if c is not None and str(c).strip()]
    if not chapters:
        raise ValidationFailed("chapter must contain at least one non-empty value.")
    return chapters


def validate_counts(mcq_count: int, true_false_count: int) -> None:
    if mcq_count < 0 or true_false_count < 0:
        raise ValidationFailed("Question counts must not be negative.")
    if mcq_count + true_false_count == 0:
        raise ValidationFailed("At least one question must be requested.")


def _parse_choice(value: Any, enum_cls, default, field: str):
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationFailed(f"Invalid {field}. Must be one of: {allowed}.")


# ==================== GENERATED EXAM ====================

def extract_exam(response: Dict[str, Any]) -> Tuple[List[Dict], List[Dict]]:
    """Pull the MCQ and true/false lists out of the API response"""
    exam = response.get("exam") if isinstance(response, dict) else None
    mcq = exam.get("mcq_questions") if isinstance(exam, dict) else None
    true_false = exam.get("true_false_questions") if isinstance(exam, dict) else None

    if not isinstance(mcq, list) or not isinstance(true_false, list):
        logger.error("Unexpected exam payload: %s", response)
        raise UpstreamFailure("Exam generation returned an unexpected payload", details=response)
    return mcq, true_false


def _as_answer_text(value: Any) -> Any:
    if isinstance(value, bool):
        return "True" if value else "False"
    return value


def build_options(inserted: Sequence[Dict], generated: Sequence[Dict]) -> List[Dict]:
    """
    Option rows for inserted questions, paired positionally with the
    generated questions they were created from
    """
    options = []
    for question, source in zip(inserted, generated):
        correct_answer = _as_answer_text(source.get("correct_answer"))

        # TODO: confirm whether a question without correct_answer should fail the
        # request; today it is stored with no options
        if correct_answer is None or correct_answer == "":
            logger.warning(
                "Missing correct_answer for %s question: %s",
                question["question_type"], source.get("question"),
            )
            continue

        if question["question_type"] == QuestionType.MCQ.value:
            for choice in source.get("options") or []:
                options.append({
                    "question_id": question["question_id"],
                    "option_text": choice,
                    "is_correct": choice == correct_answer,
                })
        else:
            options.append({
                "question_id": question["question_id"],
                "option_text": "True",
                "is_correct": correct_answer == "True",
            })
            options.append({
                "question_id": question["question_id"],
                "option_text": "False",
                "is_correct": correct_answer == "False",
            })
    return options


def _column_value(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Enum):
        return value.value
    return value


# ==================== PIPELINE ====================

def run_pipeline(ctx: HandlerContext, quiz: Dict[str, Any], api_payload: Dict[str, Any],
                 language: Language, version_test: str, bubble_quiz_id: Any, attempt: Any) -> Dict:
    store = ctx.store

    quiz_id = store.insert_quiz({k: _column_value(v) for k, v in quiz.items()})
    logger.info("Created quiz %s, requesting generated exam (%s)", quiz_id, language.value)

    response = ctx.genexam.generate(api_payload, language.value)
    mcq, true_false = extract_exam(response)
    number_of_questions = len(mcq) + len(true_false)

    generated = mcq + true_false
    rows = [(q.get("question"), QuestionType.MCQ.value) for q in mcq]
    rows += [(q.get("question"), QuestionType.TRUE_FALSE.value) for q in true_false]
    inserted = store.insert_questions(quiz_id, rows)

    options = build_options(inserted, generated)
    store.insert_options(options)
    logger.info("Stored %d questions and %d options for quiz %s", len(inserted), len(options), quiz_id)

    workflow_response = ctx.workflow.update_attempt_status(
        version_test=version_test,
        bubble_quiz_id=bubble_quiz_id,
        attempt=attempt,
        quiz_id=quiz_id,
        number_of_questions=number_of_questions,
    )

    return {
        "quiz_id": quiz_id,
        "number_of_questions": number_of_questions,
        "workflow_response": workflow_response,
    }


# ==================== APP ====================

def create_app(context: HandlerContext = None) -> FastAPI:
    app = create_base_app(
        title="Exam Orchestrator",
        description="Generates exams through the exam-authoring API and stores them",
    )
    app.state.context = context

    @app.post("/")
    def generate_exam(request: ExamRequest, ctx: HandlerContext = Depends(get_context)):
        """Single-mode generation: always persists, English API profile"""
        missing = request.missing()
        if missing:
            raise ValidationFailed("Invalid or missing parameters", details={"missing": missing})

        quiz = {
            "created_by": request.created_by,
            "subject_id": request.subject_id,
            "chapter": request.chapter,
            "is_active": request.is_active,
            "class": request.class_name,
            "number_of_questions": request.number_of_mcq_questions + request.number_of_true_false_questions,
            "duration": request.duration,
            "questions_types": request.questions_types,
            "difficulty": request.difficulty,
            "class_id": request.class_id,
            "code": request.code,
            "term_id": request.term_id,
        }
        api_payload = {
            "exam_difficulty_level": request.exam_difficulty_level,
            "educational_system": request.educational_system,
            "academic_year": request.academic_year,
            "semester": request.semester,
            "subject": request.subject,
            "chapter": request.chapter,
            "number_of_mcq_questions": request.number_of_mcq_questions,
            "number_of_true_false_questions": request.number_of_true_false_questions,
        }

        data = run_pipeline(
            ctx, quiz, api_payload, Language.EN,
            request.version_test, request.bubble_quiz_id, request.attempt,
        )
        return success(data=data, message=SUCCESS_MESSAGE)

    @app.post("/v2")
    def generate_exam_v2(request: ExamRequestV2, ctx: HandlerContext = Depends(get_context)):
        """
        Generation with a mode switch

        - test: proxies to the sandbox endpoint, stores nothing
        - live: full pipeline, API profile chosen by language
        """
        mode = _parse_choice(request.mode, ExamMode, ExamMode.LIVE, "mode")
        language = _parse_choice(request.language, Language, Language.EN, "language")

        missing = request.missing(mode)
        if missing:
            raise ValidationFailed("Invalid or missing parameters", details={"missing": missing})

        chapters = sanitize_chapters(request.chapter)
        validate_counts(request.mcq_count, request.true_false_count)

        api_payload = {
            "difficulty": request.difficulty,
            "educational_system": request.educational_system,
            "academic_year": request.academic_year,
            "semester": request.semester,
            "subject": request.subject,
            "chapter": chapters,
            "mcq_count": request.mcq_count,
            "true_false_count": request.true_false_count,
        }

        if mode == ExamMode.TEST:
            output = ctx.genexam.generate(api_payload, language.value, sandbox=True)
            data = dict(output)
            data.update({
                "attempt_id": request.attempt_id,
                "bubble_quiz_id": request.bubble_quiz_id,
                "mode": mode.value,
                "language": language.value,
            })
            return success(data=data, message="Sandbox exam generated successfully")

        quiz = {
            "created_by": request.created_by,
            "subject_id": request.subject_id,
            "chapter": chapters,
            "is_active": request.is_active if request.is_active is not None else True,
            "class": request.class_name,
            "number_of_questions": request.mcq_count + request.true_false_count,
            "duration": request.duration,
            "questions_types": request.questions_types,
            "difficulty": request.difficulty,
            "class_id": request.class_id,
            "code": request.code,
            "term_id": request.term_id,
            "language": language,
        }

        data = run_pipeline(
            ctx, quiz, api_payload, language,
            request.version_test, request.bubble_quiz_id, request.attempt,
        )
        return success(data=data, message=SUCCESS_MESSAGE)

    return app
