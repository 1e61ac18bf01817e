# gats_iqtest/core/answers.py
from typing import Collection, Dict, Iterable, Iterator, List, Optional

from ..models.schemas import Answer
from .exceptions import UnknownQuestionError


class AnswerSet:
    """Answers keyed by question id, one per question. Blank input never touches the set."""

    def __init__(self):
        self._answers: Dict[str, str] = {}

    @classmethod
    def from_answers(cls, answers: Iterable[Answer],
                     known_ids: Optional[Collection[str]] = None) -> "AnswerSet":
        """Fold submitted answers in order, last non-blank answer per question wins."""
        answer_set = cls()
        for answer in answers:
            if known_ids is not None and answer.question_id not in known_ids:
                raise UnknownQuestionError(answer.question_id)
            answer_set.upsert(answer.question_id, answer.answer)
        return answer_set

    def upsert(self, question_id: str, answer_text: str) -> bool:
        """Insert or overwrite the answer. Returns False when the input was blank."""
        if not answer_text or not answer_text.strip():
            return False
        # dict assignment keeps the original slot of an existing key
        self._answers[question_id] = answer_text
        return True

    def lookup(self, question_id: str) -> Optional[str]:
        return self._answers.get(question_id)

    def as_answers(self) -> List[Answer]:
        return [Answer(question_id=qid, answer=text) for qid, text in self._answers.items()]

    def clear(self):
        self._answers.clear()

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._answers

    def __len__(self) -> int:
        return len(self._answers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)
