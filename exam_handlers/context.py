from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .config import Settings
from .database import Database, ExamStore
from .genexam import GenExamClient, WorkflowClient
from .log import configure
from .storage import DocumentStorage


@dataclass
class HandlerContext:
    """Everything a handler needs from the outside world"""

    settings: Settings
    store: ExamStore
    storage: DocumentStorage
    genexam: GenExamClient
    workflow: WorkflowClient


def build_context(settings: Optional[Settings] = None) -> HandlerContext:
    settings = settings or Settings.from_env()
    configure(settings.log_level)
    return HandlerContext(
        settings=settings,
        store=ExamStore(Database(settings)),
        storage=DocumentStorage(settings),
        genexam=GenExamClient(settings),
        workflow=WorkflowClient(settings),
    )


def get_context(request: Request) -> HandlerContext:
    """FastAPI dependency resolving the context attached to the app"""
    return request.app.state.context
