"""
Clients for the external exam-authoring API (GenExam) and the workflow
endpoint notified once a generated exam has been stored.
"""

from dataclasses import dataclass
from typing import Any, Dict

import requests

from .config import Settings
from .errors import UpstreamFailure
from .log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ApiProfile:
    """Key, header and paths used for one exam language"""

    api_key: str
    header: str
    path: str
    sandbox_path: str


def profiles_from_settings(settings: Settings) -> Dict[str, ApiProfile]:
    return {
        "en": ApiProfile(
            api_key=settings.genexam_api_key,
            header=settings.genexam_api_header,
            path=settings.genexam_path_en,
            sandbox_path=settings.genexam_sandbox_path_en,
        ),
        "ar": ApiProfile(
            api_key=settings.genexam_api_key_ar or settings.genexam_api_key,
            header=settings.genexam_api_header_ar,
            path=settings.genexam_path_ar,
            sandbox_path=settings.genexam_sandbox_path_ar,
        ),
    }


def _json_or_text(res: requests.Response) -> Any:
    try:
        return res.json()
    except ValueError:
        return res.text


class GenExamClient:
    def __init__(self, settings: Settings, session: requests.Session = None):
        self.base_url = settings.genexam_base_url.rstrip("/")
        self.timeout = settings.http_timeout_seconds
        self.profiles = profiles_from_settings(settings)
        self.session = session or requests.Session()

    def generate(self, payload: Dict[str, Any], language: str = "en", sandbox: bool = False) -> Dict[str, Any]:
        """POST the generation parameters and return the decoded exam JSON"""
        profile = self.profiles[language]
        url = self.base_url + (profile.sandbox_path if sandbox else profile.path)
        headers = {
            profile.header: profile.api_key,
            "Content-Type": "application/json",
        }

        try:
            res = self.session.post(url, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("GenExam request failed: %s", e)
            raise UpstreamFailure("Failed to fetch data from API", details=str(e))

        if not res.ok:
            logger.error("GenExam error %s: %s", res.status_code, res.text)
            raise UpstreamFailure("Failed to fetch data from API", details=res.text)

        data = _json_or_text(res)
        if not isinstance(data, dict):
            logger.error("GenExam returned a non-object body: %r", data)
            raise UpstreamFailure("Failed to fetch data from API", details=data)
        return data


class WorkflowClient:
    """Notifies the completion workflow that an exam is ready"""

    def __init__(self, settings: Settings, session: requests.Session = None):
        self.base_url = settings.workflow_base_url.rstrip("/")
        self.key = settings.workflow_key
        self.timeout = settings.http_timeout_seconds
        self.session = session or requests.Session()

    def update_attempt_status(self, version_test: str, bubble_quiz_id: Any, attempt: Any,
                              quiz_id: int, number_of_questions: int) -> Any:
        url = f"{self.base_url}/{version_test}/api/1.1/wf/update_attempt_status"
        params = {
            "key": self.key,
            "bubble_quiz_id": bubble_quiz_id,
            "attempt": attempt,
            "quiz_id": quiz_id,
            "number_of_questions": number_of_questions,
        }

        try:
            res = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Workflow request failed: %s", e)
            raise UpstreamFailure("Failed to update exam status", details=str(e))

        data = _json_or_text(res)
        logger.info("Workflow response for quiz %s: %s", quiz_id, data)

        if not res.ok:
            raise UpstreamFailure("Failed to update exam status", details=data)
        return data
