# gats_iqtest/api/routes.py
import html
import io
import logging
from typing import Any, Dict, List

import markdown
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from ..core.config import config
from ..core.session import IQTestSession
from ..core.utils import DateTimeUtils
from ..models.schemas import (
    ExportRequest,
    IQTestResult,
    ScoreRequest,
    SessionAnswerRequest,
    StartSessionRequest,
    UserProfile,
)
from ..services.assessment_service import AssessmentService

logger = logging.getLogger(__name__)

router = APIRouter()

def get_assessment_service(request: Request) -> AssessmentService:
    return request.app.state.assessment_service

def result_payload(result: IQTestResult) -> Dict[str, Any]:
    payload = result.to_payload()
    # markup in model text renders as literal text
    payload["explanationHtml"] = markdown.markdown(html.escape(result.explanation, quote=False))
    return payload

def session_payload(session_id: str, session: IQTestSession) -> Dict[str, Any]:
    current = session.current_question
    return {
        "sessionId": session_id,
        "state": session.state.value,
        "currentQuestion": session.position,
        "totalQuestions": session.total_questions,
        "isLastQuestion": session.is_last_question,
        "question": current.to_payload() if current else None,
        "currentAnswer": session.lookup(current.id) if current else None,
        "answers": [a.model_dump(by_alias=True) for a in session.answers()],
        "unanswered": session.missing_question_ids(),
        "result": result_payload(session.result) if session.result else None
    }

def attachment(payload: bytes, filename: str, media_type: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(payload),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )

@router.get("/")
async def home():
    """Home endpoint"""
    return {
        "service": config.API_TITLE,
        "version": config.API_VERSION,
        "status": "operational"
    }

@router.get("/api/health")
async def api_health():
    return {
        "status": "healthy",
        "timestamp": DateTimeUtils.get_current_timestamp()
    }

# ==================== Stateless flow ====================

@router.get("/api/questions")
async def get_questions(service: AssessmentService = Depends(get_assessment_service)) -> List[Dict[str, Any]]:
    """Generate a fresh question set"""
    questions = await service.fetch_questions()
    return [q.to_payload() for q in questions]

@router.post("/api/users")
async def validate_user(profile: UserProfile):
    """Validate the profile form before the test starts"""
    logger.info(f"👤 Profile accepted for {profile.name}")
    return profile.to_payload()

@router.post("/api/results")
async def score_results(body: ScoreRequest, service: AssessmentService = Depends(get_assessment_service)):
    """Score submitted answers"""
    result = await service.score_answers(body.profile, body.answers, body.questions)
    return result_payload(result)

@router.post("/api/results/download")
async def download_results(body: ExportRequest,
                           format: str = Query("pdf", pattern="^(pdf|txt)$"),
                           service: AssessmentService = Depends(get_assessment_service)):
    """Download results as PDF or plain text"""
    payload, filename, media_type = service.export_file(body.profile, body.result, body.answers, format)
    return attachment(payload, filename, media_type)

# ==================== Session flow ====================

@router.post("/api/sessions", status_code=201)
async def start_session(body: StartSessionRequest,
                        service: AssessmentService = Depends(get_assessment_service)):
    session_id, session = await service.start_session(body.profile)
    return session_payload(session_id, session)

@router.get("/api/sessions/{session_id}")
async def get_session(session_id: str, service: AssessmentService = Depends(get_assessment_service)):
    session, _ = service.get_session(session_id)
    return session_payload(session_id, session)

@router.post("/api/sessions/{session_id}/answer")
async def answer_question(session_id: str, body: SessionAnswerRequest,
                          service: AssessmentService = Depends(get_assessment_service)):
    session = service.answer(session_id, body.answer, body.question_id)
    return session_payload(session_id, session)

@router.post("/api/sessions/{session_id}/next")
async def next_question(session_id: str, body: SessionAnswerRequest,
                        service: AssessmentService = Depends(get_assessment_service)):
    session, outcome = service.navigate(session_id, "next", body.answer)
    return {**session_payload(session_id, session), "navigation": outcome.value}

@router.post("/api/sessions/{session_id}/previous")
async def previous_question(session_id: str, body: SessionAnswerRequest,
                            service: AssessmentService = Depends(get_assessment_service)):
    session, outcome = service.navigate(session_id, "previous", body.answer)
    return {**session_payload(session_id, session), "navigation": outcome.value}

@router.post("/api/sessions/{session_id}/submit")
async def submit_session(session_id: str, body: SessionAnswerRequest,
                         service: AssessmentService = Depends(get_assessment_service)):
    session = await service.submit(session_id, body.answer)
    return session_payload(session_id, session)

@router.get("/api/sessions/{session_id}/download")
async def download_session(session_id: str,
                           format: str = Query("pdf", pattern="^(pdf|txt)$"),
                           service: AssessmentService = Depends(get_assessment_service)):
    payload, filename, media_type = service.export_session(session_id, format)
    return attachment(payload, filename, media_type)

@router.delete("/api/sessions/{session_id}")
async def end_session(session_id: str, service: AssessmentService = Depends(get_assessment_service)):
    removed = service.end_session(session_id)
    return {"sessionId": session_id, "removed": removed}
