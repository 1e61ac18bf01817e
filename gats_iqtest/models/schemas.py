# gats_iqtest/models/schemas.py
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    SHORT_ANSWER = "short_answer"


class Question(BaseModel):
    """A single generated question. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: QuestionType
    question: str = Field(min_length=1)
    options: Optional[Tuple[str, ...]] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Models sometimes emit numeric ids and numeric options
        if isinstance(data.get("id"), (int, float)):
            data["id"] = str(data["id"])
        options = data.get("options")
        if data.get("type") == QuestionType.SHORT_ANSWER.value:
            data.pop("options", None)
        elif isinstance(options, list):
            data["options"] = [str(o).strip() if isinstance(o, (int, float)) else o for o in options]
        return data

    @field_validator("id", "question")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def _check_options(self) -> "Question":
        if self.type == QuestionType.MULTIPLE_CHOICE:
            if not self.options:
                raise ValueError("multiple_choice questions need a non-empty options list")
            if any(not option.strip() for option in self.options):
                raise ValueError("options must not be blank")
        return self

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class Answer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question_id: str = Field(alias="questionId", min_length=1)
    answer: str = ""


class PerformanceEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str = Field(min_length=1)
    percentage: int = Field(ge=0, le=100)


class IQTestResult(BaseModel):
    """Score payload produced by the scoring step, never partially filled."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    iq_score: int = Field(alias="iqScore")
    iq_category: str = Field(alias="iqCategory", min_length=1)
    percentile: int = Field(ge=0, le=100)
    performance: Tuple[PerformanceEntry, ...]
    explanation: str

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class UserProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=2)
    country: str = Field(min_length=1)
    age: int = Field(ge=5, le=120)
    school: str = Field(min_length=1)
    gender: Optional[str] = None
    photo_path: Optional[str] = Field(default=None, alias="photoPath")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ==================== Request bodies ====================

class ScoreRequest(BaseModel):
    profile: UserProfile = Field(validation_alias=AliasChoices("profile", "userData"))
    answers: List[Answer]
    questions: Optional[List[Question]] = None


class ExportRequest(BaseModel):
    profile: UserProfile = Field(validation_alias=AliasChoices("profile", "userData"))
    result: IQTestResult = Field(validation_alias=AliasChoices("result", "testResult"))
    answers: Optional[List[Answer]] = None


class StartSessionRequest(BaseModel):
    profile: UserProfile = Field(validation_alias=AliasChoices("profile", "userData"))


class SessionAnswerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answer: str = ""
    question_id: Optional[str] = Field(default=None, alias="questionId")
