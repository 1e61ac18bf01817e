# gats_iqtest/services/assessment_service.py
import asyncio
import functools
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.ai_services import TextGateway
from ..core.answers import AnswerSet
from ..core.config import config
from ..core.exceptions import (
    GatewayError,
    IncompleteSubmissionError,
    InvalidTransitionError,
)
from ..core.extractor import extract_questions, extract_score, unavailable_score
from ..core.prompts import PromptTemplates
from ..core.session import IQTestSession, Navigation, SessionState
from ..core.utils import DateTimeUtils, SessionRegistry, report_filename
from ..models.schemas import Answer, IQTestResult, Question, UserProfile
from .report_service import ReportService

logger = logging.getLogger(__name__)

class AssessmentService:
    """Question generation, scoring and export around an injected gateway"""

    def __init__(self, gateway: TextGateway, sessions: Optional[SessionRegistry] = None,
                 reports: Optional[ReportService] = None):
        self.gateway = gateway
        self.sessions = sessions if sessions is not None else SessionRegistry()
        self.reports = reports or ReportService()

    async def _generate(self, prompt: str, **kwargs) -> str:
        # Groq's client is blocking; keep it off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self.gateway.generate, prompt, **kwargs))

    # ==================== Stateless operations ====================

    async def fetch_questions(self) -> List[Question]:
        """Generate a question set. Gateway failures propagate to the caller."""
        logger.info(f"🤖 Generating {config.QUESTIONS_PER_TEST} questions ({self.gateway.name})")

        prompt = PromptTemplates.create_questions_prompt(config.QUESTIONS_PER_TEST)
        response = await self._generate(prompt)
        questions = extract_questions(response, min_count=config.MIN_VALID_QUESTIONS)

        logger.info(f"✅ {len(questions)} questions ready")
        return questions

    async def score_answers(self, profile: UserProfile, answers: Sequence[Answer],
                            questions: Optional[Sequence[Question]] = None) -> IQTestResult:
        """Score answers. Gateway failures degrade to a default result, unknown question ids raise."""
        logger.info(f"🎯 Scoring {len(answers)} answers")

        question_text = {q.id: q.question for q in questions or ()}
        # Answers to unknown ids only pass when no question list was supplied
        answer_set = AnswerSet.from_answers(answers, set(question_text) if question_text else None)
        qa_pairs = [(question_text.get(a.question_id, a.question_id), a.answer) for a in answer_set.as_answers()]
        prompt = PromptTemplates.create_scoring_prompt(profile, qa_pairs)

        try:
            response = await self._generate(
                prompt,
                temperature=config.SCORING_TEMPERATURE,
                max_tokens=config.SCORING_MAX_TOKENS
            )
        except GatewayError as e:
            logger.error(f"❌ Scoring call failed, returning default result: {e}")
            return unavailable_score()

        result = extract_score(response)
        logger.info(f"✅ Scoring completed: {result.iq_score} ({result.iq_category})")
        return result

    def export_result(self, profile: UserProfile, result: IQTestResult,
                      answers: Optional[Sequence[Answer]] = None) -> str:
        return self.reports.render_text(profile, result, list(answers) if answers else None)

    def export_file(self, profile: UserProfile, result: IQTestResult,
                    answers: Optional[Sequence[Answer]] = None, fmt: str = "pdf"):
        """Return (payload bytes, filename, media type) for a download"""
        if fmt == "txt":
            body = self.export_result(profile, result, answers).encode("utf-8")
            return body, report_filename(profile.name, "txt"), "text/plain; charset=utf-8"
        return self.reports.export(profile, result, list(answers) if answers else None, fmt)

    # ==================== Session flow ====================

    async def start_session(self, profile: UserProfile) -> Tuple[str, IQTestSession]:
        # No session is created when generation fails
        questions = await self.fetch_questions()
        session_id, session = self.sessions.create(profile)
        session.load_questions(questions)
        return session_id, session

    def get_session(self, session_id: str) -> Tuple[IQTestSession, UserProfile]:
        return self.sessions.get(session_id)

    def answer(self, session_id: str, answer_text: str,
               question_id: Optional[str] = None) -> IQTestSession:
        session, _ = self.sessions.get(session_id)
        if question_id is None:
            session.answer_current(answer_text)
        else:
            session.answer(question_id, answer_text)
        return session

    def navigate(self, session_id: str, direction: str,
                 answer_text: str = "") -> Tuple[IQTestSession, Navigation]:
        """Save the current answer (if any), then move"""
        session, _ = self.sessions.get(session_id)
        session.answer_current(answer_text)
        if direction == "next":
            return session, session.go_next()
        if direction == "previous":
            return session, session.go_previous()
        raise ValueError(f"Unknown direction: {direction}")

    async def submit(self, session_id: str, answer_text: str = "") -> IQTestSession:
        session, profile = self.sessions.get(session_id)
        if session.state != SessionState.IN_PROGRESS:
            raise InvalidTransitionError("submit", session.state.value)

        session.answer_current(answer_text)
        missing = session.missing_question_ids()
        if missing:
            raise IncompleteSubmissionError(missing)

        result = await self.score_answers(profile, session.answers(), session.questions)
        session.record_result(result)
        logger.info(f"🏁 Session completed: {session_id}")
        return session

    def export_session(self, session_id: str, fmt: str = "pdf"):
        session, profile = self.sessions.get(session_id)
        if session.state != SessionState.COMPLETED:
            raise InvalidTransitionError("export results", session.state.value)
        return self.reports.export(profile, session.result, session.answers(), fmt)

    def end_session(self, session_id: str) -> bool:
        return self.sessions.remove(session_id)

    def health_check(self) -> Dict[str, Any]:
        """Health check for assessment service"""
        gateway_health = self.gateway.health_check()
        return {
            "status": "healthy" if gateway_health.get("status") == "healthy" else "degraded",
            "gateway": gateway_health,
            **self.sessions.stats(),
            "timestamp": DateTimeUtils.get_current_timestamp()
        }
