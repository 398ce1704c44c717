from typing import Dict

from fastapi import Depends, FastAPI

from .context import HandlerContext, get_context
from .database import ExamStore
from .errors import ValidationFailed
from .models import ResultsRequest, missing_fields
from .responses import create_base_app, success


def summarize_attempt(store: ExamStore, user_id: int, quiz_id: int, attempt_id: int) -> Dict:
    """Correct/wrong/unanswered counts for an attempt; read-only"""
    total = store.count_quiz_questions(quiz_id)
    answers = store.list_attempt_answers(attempt_id, user_id)

    correct = sum(1 for a in answers if a["is_correct"] is True)
    wrong = sum(1 for a in answers if a["is_correct"] is False)

    return {
        "total_questions": total,
        "correct_answers": correct,
        "wrong_answers": wrong,
        "unanswered_questions": max(total - (correct + wrong), 0),
    }


def create_app(context: HandlerContext = None) -> FastAPI:
    app = create_base_app(
        title="Results Aggregator",
        description="Counts correct, wrong and unanswered questions of an attempt",
    )
    app.state.context = context

    @app.post("/")
    def get_results(request: ResultsRequest, ctx: HandlerContext = Depends(get_context)):
        if missing_fields(request, ["user_id", "quiz_id", "attempt_id"]):
            raise ValidationFailed("Missing required parameters: user_id, quiz_id, attempt_id")

        return success(data=summarize_attempt(ctx.store, request.user_id, request.quiz_id, request.attempt_id))

    return app
