# gats_iqtest/core/extractor.py
"""
Recovers structured questions / scores from free-form model replies.

The model is asked for JSON but nothing guarantees it: replies arrive
wrapped in prose or code fences, with literal newlines inside strings, or
truncated. Extraction scans for where the value starts and decodes the
leading JSON value from there, retrying with a greedy bracketed span.
Anything unusable yields the fixed fallback payload, so callers always
receive a value of the expected shape.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from ..models.schemas import IQTestResult, Question
from .fallback_data import FALLBACK_QUESTIONS, FALLBACK_SCORE, UNAVAILABLE_SCORE

logger = logging.getLogger(__name__)


class ResponseKind(str, Enum):
    QUESTIONS = "questions"
    SCORE = "score"


_START_PATTERNS = {
    ResponseKind.QUESTIONS: re.compile(r"\[\s*\{"),
    ResponseKind.SCORE: re.compile(r"\{"),
}

_SPAN_PATTERNS = {
    ResponseKind.QUESTIONS: re.compile(r"\[\s*\{.*\}\s*\]", re.DOTALL),
    ResponseKind.SCORE: re.compile(r"\{.*\}", re.DOTALL),
}

# newline, tab, carriage return, backspace, form feed, vertical tab
_CONTROL_CHARS = re.compile(r"[\n\t\r\b\f\v]")

_decoder = json.JSONDecoder()


def fallback_questions() -> List[Question]:
    return [Question.model_validate(q) for q in FALLBACK_QUESTIONS]


def fallback_score() -> IQTestResult:
    return IQTestResult.model_validate(FALLBACK_SCORE)


def unavailable_score() -> IQTestResult:
    """Result used when the scoring call never produced a reply."""
    return IQTestResult.model_validate(UNAVAILABLE_SCORE)


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS.sub(" ", text)


def find_json_span(text: str, kind: ResponseKind) -> Optional[str]:
    if not text:
        return None
    match = _SPAN_PATTERNS[ResponseKind(kind)].search(text)
    return match.group(0) if match else None


def decode_json_span(text: str, kind: ResponseKind) -> Optional[Any]:
    """Parse the first JSON value of the given kind, or None."""
    kind = ResponseKind(kind)
    starts = [m.start() for m in _START_PATTERNS[kind].finditer(text or "")]
    if not starts:
        logger.warning(f"No {kind.value} JSON span found in model reply")
        return None

    # Decode only the leading value; whatever follows it is prose
    for offset in starts:
        try:
            value, _ = _decoder.raw_decode(strip_control_chars(text[offset:]))
            return value
        except json.JSONDecodeError:
            continue

    span = find_json_span(text, kind)
    if span is None:
        logger.warning(f"Model reply is not valid JSON ({kind.value})")
        return None
    try:
        return json.loads(strip_control_chars(span))
    except json.JSONDecodeError as e:
        logger.warning(f"Model reply is not valid JSON: {e}")
        return None


def extract_questions(text: Optional[str], min_count: int = 1) -> List[Question]:
    data = decode_json_span(text or "", ResponseKind.QUESTIONS)
    if not isinstance(data, list):
        logger.warning("⚠️ Using fallback question set")
        return fallback_questions()

    questions = []
    seen_ids = set()
    for i, entry in enumerate(data, 1):
        if not isinstance(entry, dict):
            logger.warning(f"Dropping question {i}: not an object")
            continue
        try:
            question = Question.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Dropping question {i}: {e.error_count()} validation error(s)")
            continue
        if question.id in seen_ids:
            logger.warning(f"Dropping question {i}: duplicate id {question.id!r}")
            continue
        seen_ids.add(question.id)
        questions.append(question)

    if len(questions) < max(min_count, 1):
        logger.warning(
            f"⚠️ Only {len(questions)} usable questions (need {min_count}), using fallback set"
        )
        return fallback_questions()

    return questions


def extract_score(text: Optional[str]) -> IQTestResult:
    data = decode_json_span(text or "", ResponseKind.SCORE)
    if not isinstance(data, dict):
        logger.warning("⚠️ Using fallback score")
        return fallback_score()

    try:
        return IQTestResult.model_validate(data)
    except ValidationError as e:
        logger.warning(f"⚠️ Score reply failed validation ({e.error_count()} errors), using fallback score")
        return fallback_score()


def extract(text: Optional[str], kind: ResponseKind, min_count: int = 1) -> Union[List[Question], IQTestResult]:
    if ResponseKind(kind) == ResponseKind.QUESTIONS:
        return extract_questions(text, min_count=min_count)
    return extract_score(text)
