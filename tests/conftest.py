from __future__ import annotations

import json
import os

import pytest
from fastapi.testclient import TestClient

# Test-mode runtime guards:
# - no external LLM traffic
# - sessions never expire mid-test
os.environ.setdefault("USE_DUMMY_DATA", "false")
os.environ.setdefault("GROQ_API_KEY", "")
os.environ.setdefault("QUESTIONS_PER_TEST", "8")
os.environ.setdefault("MIN_VALID_QUESTIONS", "2")

from gats_iqtest.core.ai_services import TextGateway  # noqa: E402
from gats_iqtest.core.utils import SessionRegistry  # noqa: E402
from gats_iqtest.main import create_app  # noqa: E402
from gats_iqtest.models.schemas import Question, UserProfile  # noqa: E402

ADA_QUESTIONS = [
    {"id": "q1", "type": "multiple_choice", "question": "2+2?", "options": ["3", "4", "5", "6"]},
    {"id": "q2", "type": "short_answer", "question": "Next: 1,2,3,?"},
]

ADA_SCORE = {
    "iqScore": 118,
    "iqCategory": "Above Average",
    "percentile": 88,
    "performance": [
        {"category": "Logical Reasoning", "percentage": 85},
        {"category": "Pattern Recognition", "percentage": 90},
    ],
    "explanation": "Ada solved both items.\n\nStrong pattern recognition overall.",
}


class ScriptedGateway(TextGateway):
    """Gateway double replying with canned text or raising canned errors"""

    name = "scripted"

    def __init__(self, question_reply=None, score_reply=None, question_error=None, score_error=None):
        self.question_reply = question_reply
        self.score_reply = score_reply
        self.question_error = question_error
        self.score_error = score_error
        self.prompts = []

    def generate(self, prompt, temperature=None, max_tokens=None):
        self.prompts.append(prompt)
        if "Questions and Answers:" in prompt:
            if self.score_error is not None:
                raise self.score_error
            return self.score_reply
        if self.question_error is not None:
            raise self.question_error
        return self.question_reply


def wrap_in_prose(payload) -> str:
    return f"Of course! Here is the data you asked for:\n```json\n{json.dumps(payload, indent=2)}\n```\nLet me know if you need more."


@pytest.fixture(autouse=True)
def patched_config(monkeypatch):
    from gats_iqtest.core.config import config

    monkeypatch.setattr(config, "QUESTIONS_PER_TEST", 8)
    monkeypatch.setattr(config, "MIN_VALID_QUESTIONS", 2)
    monkeypatch.setattr(config, "USE_DUMMY_DATA", False)
    return config


@pytest.fixture
def ada_profile() -> UserProfile:
    return UserProfile(name="Ada", country="other", age=30, school="MIT", gender="female")


@pytest.fixture
def ada_questions():
    return [Question.model_validate(q) for q in ADA_QUESTIONS]


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway(
        question_reply=wrap_in_prose(ADA_QUESTIONS),
        score_reply=wrap_in_prose(ADA_SCORE),
    )


@pytest.fixture
def client(gateway):
    app = create_app(gateway=gateway, sessions=SessionRegistry(start_cleanup=False))
    with TestClient(app) as tc:
        yield tc
