# gats_iqtest/core/exceptions.py
from typing import List, Optional


class IQTestError(Exception):
    """Base class for all application errors"""


class GatewayError(IQTestError):
    """The language model could not be reached or used"""


class GatewayConfigurationError(GatewayError):
    """Missing or rejected credentials / model settings. Not retried."""


class GatewayTransportError(GatewayError):
    """Network failure, timeout or server-side error from the model API"""


class SessionError(IQTestError):
    pass


class InvalidTransitionError(SessionError):
    """Operation not allowed in the session's current state"""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is {state}")


class EmptyQuestionListError(SessionError):
    def __init__(self, message: str = "Question list is empty"):
        super().__init__(message)


class DuplicateQuestionError(SessionError):
    def __init__(self, question_ids: List[str]):
        self.question_ids = list(question_ids)
        super().__init__(f"Duplicate question ids: {', '.join(self.question_ids)}")


class UnknownQuestionError(SessionError):
    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(f"Unknown question id: {question_id}")


class IncompleteSubmissionError(SessionError):
    """Raised on submit while some questions are still unanswered"""

    def __init__(self, missing_ids: Optional[List[str]] = None):
        self.missing_ids = list(missing_ids or [])
        super().__init__(
            f"Please answer all questions before submitting ({len(self.missing_ids)} unanswered)"
        )


class SessionNotFoundError(SessionError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("Session not found or expired")
