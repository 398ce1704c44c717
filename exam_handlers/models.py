from enum import Enum
from typing import Any, ClassVar, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool

# ==================== ENUMS & CONSTANTS ====================

class QuestionType(str, Enum):
    MCQ = "mcq"
    TRUE_FALSE = "true_false"

class ExamMode(str, Enum):
    TEST = "test"
    LIVE = "live"

class Language(str, Enum):
    EN = "en"
    AR = "ar"

ANSWER_REQUIRED_FIELDS = ["user_id", "option_id", "question_id", "attempt_id"]


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def missing_fields(model: BaseModel, fields: Iterable[str]) -> List[str]:
    """Names from `fields` whose value on the model is absent or blank"""
    return [f for f in fields if is_blank(getattr(model, f, None))]


# ==================== REQUEST MODELS ====================

class AnswerIn(BaseModel):
    user_id: int
    option_id: int
    question_id: int
    attempt_id: int
    answer_text: Optional[str] = None
    score: Optional[float] = None
    comment: Optional[str] = None


class CommentRequest(BaseModel):
    is_insert: Optional[StrictBool] = None
    question_id: Optional[int] = None
    attempt_id: Optional[int] = None
    student_id: Optional[int] = None
    comment_text: Optional[str] = None


class ResultsRequest(BaseModel):
    user_id: Optional[int] = None
    quiz_id: Optional[int] = None
    attempt_id: Optional[int] = None


class DocumentRequest(BaseModel):
    # type is checked by the handler so a bad value gets its own message
    quiz_id: Any = None


class ExamRequest(BaseModel):
    """Single-mode generation request"""

    model_config = ConfigDict(populate_by_name=True)

    exam_difficulty_level: Optional[str] = None
    educational_system: Optional[str] = None
    academic_year: Optional[Any] = None
    semester: Optional[Any] = None
    subject: Optional[str] = None
    chapter: Optional[Union[str, List[str]]] = None
    number_of_mcq_questions: Optional[int] = None
    number_of_true_false_questions: Optional[int] = None
    created_by: Optional[int] = None
    subject_id: Optional[int] = None
    is_active: Optional[bool] = None
    class_name: Optional[Any] = Field(None, alias="class")
    duration: Optional[int] = None
    questions_types: Optional[Any] = None
    difficulty: Optional[str] = None
    class_id: Optional[int] = None
    code: Optional[Any] = None
    term_id: Optional[int] = None
    attempt: Optional[Any] = None
    version_test: Optional[str] = None
    bubble_quiz_id: Optional[Any] = None

    REQUIRED: ClassVar[List[str]] = [
        "exam_difficulty_level", "educational_system", "academic_year", "semester",
        "subject", "chapter", "number_of_mcq_questions", "number_of_true_false_questions",
        "created_by", "subject_id", "is_active", "class_name", "duration",
        "questions_types", "difficulty", "class_id", "code", "term_id",
        "attempt", "version_test", "bubble_quiz_id",
    ]

    def missing(self) -> List[str]:
        # presence only: falsy values such as is_active=false are accepted
        return [_public_name(f) for f in self.REQUIRED if getattr(self, f) is None]


class ExamRequestV2(BaseModel):
    """Generation request with test/live mode and language selection"""

    model_config = ConfigDict(populate_by_name=True)

    mode: Optional[str] = None
    language: Optional[str] = None
    difficulty: Optional[str] = None
    educational_system: Optional[str] = None
    academic_year: Optional[Any] = None
    semester: Optional[Any] = None
    subject: Optional[str] = None
    chapter: Optional[Union[str, List[Optional[str]]]] = None
    mcq_count: Optional[int] = None
    true_false_count: Optional[int] = None
    attempt_id: Optional[Any] = None
    bubble_quiz_id: Optional[Any] = None
    created_by: Optional[int] = None
    subject_id: Optional[int] = None
    class_name: Optional[Any] = Field(None, alias="class")
    duration: Optional[int] = None
    class_id: Optional[int] = None
    term_id: Optional[int] = None
    attempt: Optional[Any] = None
    version_test: Optional[str] = None
    is_active: Optional[bool] = True
    code: Optional[Any] = None
    questions_types: Optional[Any] = None

    GENERATION_FIELDS: ClassVar[List[str]] = [
        "difficulty", "educational_system", "academic_year", "semester",
        "subject", "chapter", "mcq_count", "true_false_count",
    ]
    TEST_FIELDS: ClassVar[List[str]] = ["attempt_id", "bubble_quiz_id"]
    LIVE_FIELDS: ClassVar[List[str]] = [
        "created_by", "subject_id", "class_name", "duration", "class_id",
        "term_id", "attempt", "version_test", "bubble_quiz_id",
    ]

    def missing(self, mode: ExamMode) -> List[str]:
        extra = self.TEST_FIELDS if mode == ExamMode.TEST else self.LIVE_FIELDS
        return [_public_name(f) for f in missing_fields(self, self.GENERATION_FIELDS + extra)]


def _public_name(field: str) -> str:
    return "class" if field == "class_name" else field
