"""
Pydantic models and schemas for request/response validation
"""

from .schemas import (
    QuestionType,
    Question,
    Answer,
    PerformanceEntry,
    IQTestResult,
    UserProfile,
    ScoreRequest,
    ExportRequest,
    StartSessionRequest,
    SessionAnswerRequest
)

__all__ = [
    "QuestionType",
    "Question",
    "Answer",
    "PerformanceEntry",
    "IQTestResult",
    "UserProfile",
    "ScoreRequest",
    "ExportRequest",
    "StartSessionRequest",
    "SessionAnswerRequest"
]
