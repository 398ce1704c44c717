"""
Comment Handler

One free-text comment per (question, attempt, student). `is_insert` picks
between upserting a comment and fetching the existing ones.
"""

from fastapi import Depends, FastAPI

from .context import HandlerContext, get_context
from .errors import NotFound, ValidationFailed
from .models import CommentRequest, missing_fields
from .responses import create_base_app, success

KEY_FIELDS = ["question_id", "attempt_id", "student_id"]


def create_app(context: HandlerContext = None) -> FastAPI:
    app = create_base_app(
        title="Comment Handler",
        description="Upserts and fetches per-question comments",
    )
    app.state.context = context

    @app.post("/")
    def handle_comment(request: CommentRequest, ctx: HandlerContext = Depends(get_context)):
        if request.is_insert is None:
            raise ValidationFailed(
                "Missing required field: is_insert (true for insert/update, false for fetch)."
            )

        if request.is_insert:
            if missing_fields(request, KEY_FIELDS + ["comment_text"]):
                raise ValidationFailed(
                    "Missing required fields for insert/update: "
                    "question_id, attempt_id, student_id, or comment_text."
                )
            comment, created = ctx.store.upsert_comment(
                request.question_id, request.attempt_id, request.student_id, request.comment_text
            )
            message = "Comment added successfully." if created else "Comment updated successfully."
            return success(data=comment, message=message)

        if missing_fields(request, KEY_FIELDS):
            raise ValidationFailed(
                "All parameters (question_id, attempt_id, student_id) are required for fetching data."
            )

        comments = ctx.store.find_comments(request.question_id, request.attempt_id, request.student_id)
        if not comments:
            raise NotFound("No comments found for the provided parameters.")

        return success(data=comments, message="Comments fetched successfully.")

    return app
