# gats_iqtest/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import config
from .core.ai_services import TextGateway, build_gateway
from .core.exceptions import (
    GatewayConfigurationError,
    GatewayTransportError,
    IncompleteSubmissionError,
    SessionError,
    SessionNotFoundError,
    UnknownQuestionError,
)
from .core.utils import SessionRegistry
from .api.routes import router
from .services.assessment_service import AssessmentService

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    logger.info("🚀 GatsIQTest API starting...")

    validation = config.validate()
    if not validation["valid"]:
        raise RuntimeError(f"Configuration invalid: {validation['issues']}")
    for warning in validation["warnings"]:
        logger.warning(f"⚠️ {warning}")

    logger.info("✅ Configuration validated")
    logger.info(f"📊 {config.QUESTIONS_PER_TEST} questions per test, gateway: {app.state.gateway.name}")

    yield

    logger.info("👋 Shutting down...")

def error_body(error: str, message: str, error_type: str, retryable: bool = False, **extra):
    return {"error": error, "message": message, "type": error_type, "retryable": retryable, **extra}

def register_exception_handlers(app: FastAPI):
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content=error_body("Validation Error", "Invalid request data", "validation_error",
                               errors=jsonable_errors(exc))
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        logger.warning(f"Validation error: {exc}")
        return JSONResponse(
            status_code=400,
            content=error_body("Validation Error", str(exc), "validation_error")
        )

    @app.exception_handler(GatewayConfigurationError)
    async def gateway_configuration_handler(request: Request, exc: GatewayConfigurationError):
        logger.error(f"AI service misconfigured: {exc}")
        return JSONResponse(
            status_code=503,
            content=error_body("Service Misconfigured", "The AI service is not configured. Please try again later.",
                               "configuration_error", retryable=True)
        )

    @app.exception_handler(GatewayTransportError)
    async def gateway_transport_handler(request: Request, exc: GatewayTransportError):
        logger.error(f"AI service unavailable: {exc}")
        return JSONResponse(
            status_code=502,
            content=error_body("Service Unavailable", "Failed to load IQ test questions. Please try again.",
                               "gateway_unavailable", retryable=True)
        )

    @app.exception_handler(IncompleteSubmissionError)
    async def incomplete_submission_handler(request: Request, exc: IncompleteSubmissionError):
        return JSONResponse(
            status_code=409,
            content=error_body("Incomplete Test", "Please answer all questions before submitting.",
                               "incomplete_submission", unanswered=exc.missing_ids)
        )

    @app.exception_handler(UnknownQuestionError)
    async def unknown_question_handler(request: Request, exc: UnknownQuestionError):
        logger.warning(f"Validation error: {exc}")
        return JSONResponse(
            status_code=400,
            content=error_body("Validation Error", str(exc), "validation_error",
                               question_id=exc.question_id)
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_body("Resource Not Found", str(exc), "not_found_error")
        )

    @app.exception_handler(SessionError)
    async def session_error_handler(request: Request, exc: SessionError):
        logger.warning(f"Rejected session operation: {exc}")
        return JSONResponse(
            status_code=409,
            content=error_body("Invalid Operation", str(exc), "invalid_transition")
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal Server Error", "An unexpected error occurred", "server_error")
        )

def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]

def create_app(gateway: Optional[TextGateway] = None,
               sessions: Optional[SessionRegistry] = None) -> FastAPI:
    """Build the application around an explicitly constructed gateway"""
    app = FastAPI(
        title=config.API_TITLE,
        description=config.API_DESCRIPTION,
        version=config.API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.gateway = gateway or build_gateway()
    app.state.assessment_service = AssessmentService(app.state.gateway, sessions=sessions)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check():
        """Comprehensive health check"""
        service_health = app.state.assessment_service.health_check()
        return {
            "status": service_health["status"],
            "service": "gats_iqtest_api",
            "version": config.API_VERSION,
            "ai_service": service_health["gateway"],
            "active_sessions": service_health["active_sessions"],
            "timestamp": service_health["timestamp"]
        }

    @app.get("/info")
    async def api_info():
        """API information and capabilities"""
        return {
            "name": config.API_TITLE,
            "version": config.API_VERSION,
            "description": config.API_DESCRIPTION,
            "configuration": {
                "questions_per_test": config.QUESTIONS_PER_TEST,
                "min_valid_questions": config.MIN_VALID_QUESTIONS,
                "model": config.GROQ_MODEL,
                "using_dummy_data": config.USE_DUMMY_DATA
            },
            "endpoints": {
                "questions": "GET /api/questions",
                "validate_profile": "POST /api/users",
                "score": "POST /api/results",
                "download": "POST /api/results/download",
                "start_session": "POST /api/sessions",
                "health": "GET /health",
                "docs": "GET /docs"
            }
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info("🚀 Starting GatsIQTest API")
    logger.info(f"🌐 Server: http://{config.API_HOST}:{config.API_PORT}")
    logger.info(f"📚 Docs: http://{config.API_HOST}:{config.API_PORT}/docs")

    uvicorn.run(
        "gats_iqtest.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        log_level=config.LOG_LEVEL.lower()
    )
