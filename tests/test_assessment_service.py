from __future__ import annotations

import pytest

from gats_iqtest.core.exceptions import (
    GatewayConfigurationError,
    GatewayTransportError,
    IncompleteSubmissionError,
    InvalidTransitionError,
    SessionNotFoundError,
    UnknownQuestionError,
)
from gats_iqtest.core.extractor import fallback_questions, fallback_score, unavailable_score
from gats_iqtest.core.session import Navigation, SessionState
from gats_iqtest.core.utils import SessionRegistry
from gats_iqtest.models.schemas import Answer
from gats_iqtest.services.assessment_service import AssessmentService

from conftest import ADA_QUESTIONS, ADA_SCORE, ScriptedGateway


@pytest.fixture
def service(gateway):
    return AssessmentService(gateway, sessions=SessionRegistry(start_cleanup=False))


@pytest.mark.asyncio
async def test_fetch_questions_parses_model_reply(service, gateway):
    questions = await service.fetch_questions()

    assert [q.to_payload() for q in questions] == ADA_QUESTIONS
    assert "Generate 8 IQ test questions" in gateway.prompts[0]


@pytest.mark.asyncio
async def test_fetch_questions_uses_fallback_on_garbage():
    service = AssessmentService(ScriptedGateway(question_reply="no json here"),
                                sessions=SessionRegistry(start_cleanup=False))
    assert await service.fetch_questions() == fallback_questions()


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    GatewayConfigurationError("GROQ_API_KEY not provided"),
    GatewayTransportError("timed out"),
])
async def test_fetch_questions_propagates_gateway_errors(error):
    service = AssessmentService(ScriptedGateway(question_error=error),
                                sessions=SessionRegistry(start_cleanup=False))
    with pytest.raises(type(error)):
        await service.fetch_questions()


@pytest.mark.asyncio
async def test_score_answers_builds_prompt_from_question_text(service, gateway, ada_profile, ada_questions):
    answers = [Answer(question_id="q1", answer="4"), Answer(question_id="q2", answer="4")]

    result = await service.score_answers(ada_profile, answers, ada_questions)

    assert result.to_payload() == ADA_SCORE
    prompt = gateway.prompts[-1]
    assert "Question: 2+2?\nUser's Answer: 4" in prompt
    assert "Question: Next: 1,2,3,?\nUser's Answer: 4" in prompt


@pytest.mark.asyncio
async def test_score_answers_without_questions_uses_ids(service, gateway, ada_profile):
    await service.score_answers(ada_profile, [Answer(question_id="q9", answer="yes")])
    assert "Question: q9\nUser's Answer: yes" in gateway.prompts[-1]


@pytest.mark.asyncio
async def test_score_answers_reconciles_duplicates(service, gateway, ada_profile, ada_questions):
    answers = [Answer(question_id="q1", answer="3"), Answer(question_id="q1", answer="4"),
               Answer(question_id="q1", answer="")]

    await service.score_answers(ada_profile, answers, ada_questions)

    prompt = gateway.prompts[-1]
    assert prompt.count("User's Answer:") == 1
    assert "Question: 2+2?\nUser's Answer: 4" in prompt


@pytest.mark.asyncio
async def test_score_answers_rejects_unknown_question(service, gateway, ada_profile, ada_questions):
    with pytest.raises(UnknownQuestionError):
        await service.score_answers(ada_profile, [Answer(question_id="nope", answer="x")], ada_questions)
    assert gateway.prompts == []


@pytest.mark.asyncio
async def test_unreachable_scorer_returns_default_result(ada_profile):
    gateway = ScriptedGateway(score_error=GatewayTransportError("connection reset"))
    service = AssessmentService(gateway, sessions=SessionRegistry(start_cleanup=False))

    result = await service.score_answers(ada_profile, [Answer(question_id="q1", answer="4")])

    assert result == unavailable_score()
    assert result.iq_score == 105


@pytest.mark.asyncio
async def test_unparseable_score_returns_fallback(ada_profile):
    gateway = ScriptedGateway(score_reply="Your IQ is very high!")
    service = AssessmentService(gateway, sessions=SessionRegistry(start_cleanup=False))

    result = await service.score_answers(ada_profile, [Answer(question_id="q1", answer="4")])

    assert result == fallback_score()


@pytest.mark.asyncio
async def test_complete_run_exports_clean_report(service, ada_profile, ada_questions):
    answers = [Answer(question_id="q1", answer="4"), Answer(question_id="q2", answer="4")]
    result = await service.score_answers(ada_profile, answers, ada_questions)

    report = service.export_result(ada_profile, result, answers)

    assert "Name: Ada" in report
    assert "q1: 4" in report
    assert "q2: 4" in report
    assert "IQ Score: 118" in report
    assert not any(ch in report for ch in "\t\r\b\f\v")


@pytest.mark.asyncio
async def test_session_flow_start_answer_submit(service, ada_profile):
    session_id, session = await service.start_session(ada_profile)
    assert session.state == SessionState.IN_PROGRESS

    _, outcome = service.navigate(session_id, "next", "4")
    assert outcome == Navigation.MOVED
    _, outcome = service.navigate(session_id, "next", "")
    assert outcome == Navigation.READY_TO_SUBMIT

    session = await service.submit(session_id, "4")

    assert session.state == SessionState.COMPLETED
    assert session.result.iq_score == 118
    payload, filename, media_type = service.export_session(session_id, "txt")
    assert filename == "IQ_Test_Results_Ada.txt"
    assert media_type.startswith("text/plain")
    assert b"IQ Score: 118" in payload


@pytest.mark.asyncio
async def test_submit_with_gaps_keeps_session_open(service, gateway, ada_profile):
    session_id, _ = await service.start_session(ada_profile)
    service.answer(session_id, "4", question_id="q2")

    with pytest.raises(IncompleteSubmissionError) as excinfo:
        await service.submit(session_id)

    assert excinfo.value.missing_ids == ["q1"]
    session, _ = service.get_session(session_id)
    assert session.state == SessionState.IN_PROGRESS
    assert not any("Questions and Answers:" in p for p in gateway.prompts)


@pytest.mark.asyncio
async def test_failed_generation_leaves_no_session(ada_profile):
    sessions = SessionRegistry(start_cleanup=False)
    service = AssessmentService(ScriptedGateway(question_error=GatewayTransportError("down")), sessions=sessions)

    with pytest.raises(GatewayTransportError):
        await service.start_session(ada_profile)

    assert sessions.stats()["active_sessions"] == 0


@pytest.mark.asyncio
async def test_export_before_completion_is_rejected(service, ada_profile):
    session_id, _ = await service.start_session(ada_profile)
    with pytest.raises(InvalidTransitionError):
        service.export_session(session_id, "txt")


@pytest.mark.asyncio
async def test_end_session_forgets_it(service, ada_profile):
    session_id, _ = await service.start_session(ada_profile)

    assert service.end_session(session_id) is True
    assert service.end_session(session_id) is False
    with pytest.raises(SessionNotFoundError):
        service.get_session(session_id)


def test_unknown_navigation_direction(service, ada_profile, ada_questions):
    session_id, session = service.sessions.create(ada_profile)
    session.load_questions(ada_questions)
    with pytest.raises(ValueError):
        service.navigate(session_id, "sideways")


def test_health_reports_gateway_and_sessions(service):
    health = service.health_check()
    assert health["status"] == "healthy"
    assert health["gateway"]["mode"] == "scripted"
    assert health["active_sessions"] == 0


def test_export_file_formats(service, ada_profile):
    result = fallback_score()

    pdf, pdf_name, pdf_type = service.export_file(ada_profile, result, fmt="pdf")
    assert pdf.startswith(b"%PDF")
    assert pdf_name == "IQ_Test_Results_Ada.pdf"
    assert pdf_type == "application/pdf"

    with pytest.raises(ValueError):
        service.export_file(ada_profile, result, fmt="docx")
