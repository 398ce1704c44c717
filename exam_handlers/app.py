from typing import Dict

from fastapi import FastAPI

from . import answers, comments, documents, exams, results
from .context import HandlerContext

HANDLERS = {
    "answers": answers.create_app,
    "comments": comments.create_app,
    "exams": exams.create_app,
    "results": results.create_app,
    "documents": documents.create_app,
}


def create_all_apps(context: HandlerContext) -> Dict[str, FastAPI]:
    """One independent app per handler, all sharing the given context"""
    return {name: factory(context) for name, factory in HANDLERS.items()}


def create_local_app(context: HandlerContext) -> FastAPI:
    """Every handler mounted under its own prefix, for running outside Lambda"""
    app = FastAPI(title="Exam Platform Handlers", version="1.0.0")
    for name, sub_app in create_all_apps(context).items():
        app.mount(f"/{name}", sub_app)

    @app.get("/")
    def root():
        """API health check"""
        return {
            "status": "healthy",
            "service": "Exam Platform Handlers",
            "handlers": list(HANDLERS),
        }

    return app
