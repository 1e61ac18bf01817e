# gats_iqtest/core/session.py
import logging
import time
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..models.schemas import Answer, IQTestResult, Question
from .answers import AnswerSet
from .exceptions import (
    DuplicateQuestionError,
    EmptyQuestionListError,
    IncompleteSubmissionError,
    InvalidTransitionError,
    UnknownQuestionError,
)

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    EMPTY = "empty"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Navigation(str, Enum):
    MOVED = "moved"
    AT_START = "at_start"
    READY_TO_SUBMIT = "ready_to_submit"


class IQTestSession:
    """State of one user's pass through the questionnaire.

    EMPTY -> IN_PROGRESS (load_questions) -> COMPLETED (record_result).
    reset() returns to EMPTY from anywhere. Position is 1-based.
    """

    def __init__(self):
        self._questions: Tuple[Question, ...] = ()
        self._position = 0
        self._answers = AnswerSet()
        self._result: Optional[IQTestResult] = None
        self.created_at = time.time()

    # ==================== Read access ====================

    @property
    def state(self) -> SessionState:
        if self._result is not None:
            return SessionState.COMPLETED
        if self._questions:
            return SessionState.IN_PROGRESS
        return SessionState.EMPTY

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def position(self) -> int:
        return self._position

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def current_question(self) -> Optional[Question]:
        if self.state != SessionState.IN_PROGRESS:
            return None
        return self._questions[self._position - 1]

    @property
    def result(self) -> Optional[IQTestResult]:
        return self._result

    @property
    def is_last_question(self) -> bool:
        return self.state == SessionState.IN_PROGRESS and self._position == len(self._questions)

    def lookup(self, question_id: str) -> Optional[str]:
        return self._answers.lookup(question_id)

    def answers(self) -> List[Answer]:
        return self._answers.as_answers()

    def missing_question_ids(self) -> List[str]:
        return [q.id for q in self._questions if q.id not in self._answers]

    # ==================== Transitions ====================

    def load_questions(self, questions: Sequence[Question]):
        if self.state != SessionState.EMPTY:
            raise InvalidTransitionError("load questions", self.state.value)
        if not questions:
            raise EmptyQuestionListError()

        ids = [q.id for q in questions]
        duplicates = sorted({qid for qid in ids if ids.count(qid) > 1})
        if duplicates:
            raise DuplicateQuestionError(duplicates)

        self._questions = tuple(questions)
        self._position = 1
        self._answers.clear()
        logger.info(f"Session loaded with {len(self._questions)} questions")

    def answer(self, question_id: str, answer_text: str) -> bool:
        self._require_in_progress("answer")
        if question_id not in {q.id for q in self._questions}:
            raise UnknownQuestionError(question_id)
        return self._answers.upsert(question_id, answer_text)

    def answer_current(self, answer_text: str) -> bool:
        self._require_in_progress("answer")
        return self._answers.upsert(self.current_question.id, answer_text)

    def go_next(self) -> Navigation:
        self._require_in_progress("go to next question")
        if self._position >= len(self._questions):
            return Navigation.READY_TO_SUBMIT
        self._position += 1
        return Navigation.MOVED

    def go_previous(self) -> Navigation:
        self._require_in_progress("go to previous question")
        if self._position <= 1:
            return Navigation.AT_START
        self._position -= 1
        return Navigation.MOVED

    def record_result(self, result: IQTestResult):
        self._require_in_progress("record result")
        missing = self.missing_question_ids()
        if missing:
            raise IncompleteSubmissionError(missing)
        self._result = result

    def reset(self):
        self._questions = ()
        self._position = 0
        self._answers.clear()
        self._result = None

    def _require_in_progress(self, operation: str):
        if self.state != SessionState.IN_PROGRESS:
            raise InvalidTransitionError(operation, self.state.value)
