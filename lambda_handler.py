# lambda_handler.py
# AWS Lambda handlers for the exam platform functions

import json
import os

from mangum import Mangum

from exam_handlers import __version__
from exam_handlers.app import create_all_apps
from exam_handlers.context import build_context
from exam_handlers.log import get_logger

logger = get_logger("lambda")

# Context is built once per container; the MySQL pool opens on first query
handler_context = build_context()
apps = create_all_apps(handler_context)

# Wrap FastAPI apps with Mangum for Lambda compatibility
answers_handler = Mangum(apps["answers"], lifespan="off")
comments_handler = Mangum(apps["comments"], lifespan="off")
exams_handler = Mangum(apps["exams"], lifespan="off")
results_handler = Mangum(apps["results"], lifespan="off")
documents_handler = Mangum(apps["documents"], lifespan="off")

HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*"
}


def _invoke(handler, event, context):
    try:
        return handler(event, context)
    except Exception as e:
        logger.exception("Lambda invocation failed")
        return {
            "statusCode": 500,
            "body": json.dumps({
                "status": "error",
                "message": "An unexpected error occurred.",
                "details": str(e),
                "error_code": "INTERNAL_ERROR"
            }),
            "headers": HEADERS
        }


# Lambda handlers
def answers(event, context):
    """
    Lambda handler for the Answer Recorder
    """
    return _invoke(answers_handler, event, context)

def comments(event, context):
    """
    Lambda handler for the Comment Handler
    """
    return _invoke(comments_handler, event, context)

def exams(event, context):
    """
    Lambda handler for the Exam Orchestrator (POST / and POST /v2)
    """
    return _invoke(exams_handler, event, context)

def results(event, context):
    """
    Lambda handler for the Results Aggregator
    """
    return _invoke(results_handler, event, context)

def documents(event, context):
    """
    Lambda handler for the Document Generator
    """
    return _invoke(documents_handler, event, context)

# Health check handler
def health_check(event, context):
    """
    Simple health check endpoint
    """
    return {
        "statusCode": 200,
        "body": json.dumps({
            "status": "healthy",
            "service": "Exam Platform Handlers",
            "version": __version__,
            "environment": os.getenv("AWS_LAMBDA_FUNCTION_NAME", "local")
        }),
        "headers": HEADERS
    }
