"""
Document Generator

Renders a quiz as a DOCX exam paper and caches it in object storage under
`quiz_{id}.docx`. A cached document is returned as-is and never rebuilt.
"""

from fastapi import Depends, FastAPI

from .config import DOCX_CONTENT_TYPE
from .context import HandlerContext, get_context
from .database import ExamStore
from .docx_builder import ExamData, render_docx
from .errors import NotFound, ValidationFailed
from .log import get_logger
from .models import DocumentRequest
from .responses import create_base_app, success

logger = get_logger(__name__)


def document_key(quiz_id: int) -> str:
    return f"quiz_{quiz_id}.docx"


def fetch_exam_data(store: ExamStore, quiz_id: int) -> ExamData:
    """Quiz, instructor, subject, then each question's options"""
    quiz = store.get_quiz(quiz_id)
    if not quiz:
        raise NotFound("Quiz not found", status_code=400)

    instructor = store.get_username(quiz["created_by"])
    if instructor is None:
        raise NotFound("Instructor not found", status_code=400)

    subject = store.get_subject_name(quiz["subject_id"])
    if subject is None:
        raise NotFound("Subject not found", status_code=400)

    questions = []
    for q in store.list_questions(quiz_id):
        questions.append(dict(q, options=store.list_options(q["question_id"])))

    return ExamData(quiz=quiz, instructor=instructor, subject=subject, questions=questions)


def create_app(context: HandlerContext = None) -> FastAPI:
    app = create_base_app(
        title="Document Generator",
        description="Generates and caches DOCX exam papers with Arabic right-to-left support",
    )
    app.state.context = context

    @app.post("/")
    def generate_document(request: DocumentRequest, ctx: HandlerContext = Depends(get_context)):
        quiz_id = request.quiz_id
        if isinstance(quiz_id, bool) or not isinstance(quiz_id, int) or quiz_id <= 0:
            raise ValidationFailed("Invalid quiz_id. Must be a number.")

        key = document_key(quiz_id)
        if ctx.storage.exists(key):
            logger.info("Serving cached document %s", key)
            return success(data={"docx_url": ctx.storage.public_url(key), "cached": True})

        logger.info("Generating document %s", key)
        exam = fetch_exam_data(ctx.store, quiz_id)
        ctx.storage.upload(key, render_docx(exam), DOCX_CONTENT_TYPE)

        return success(data={"docx_url": ctx.storage.public_url(key), "cached": False})

    return app
