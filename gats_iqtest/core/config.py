# gats_iqtest/core/config.py
import os
import logging
from typing import Dict, Any, List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Centralized configuration management"""

    # ==================== API Configuration ====================
    API_TITLE = "GatsIQTest API"
    API_DESCRIPTION = "IQ-style assessment with AI-generated questions and scoring"
    API_VERSION = "1.0.0"

    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8070"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    # ==================== Development Settings ====================
    USE_DUMMY_DATA = os.getenv("USE_DUMMY_DATA", "false").lower() == "true"

    # ==================== Question Configuration ====================
    QUESTIONS_PER_TEST = int(os.getenv("QUESTIONS_PER_TEST", "8"))
    # Below this many usable questions the whole generated set is replaced
    MIN_VALID_QUESTIONS = int(os.getenv("MIN_VALID_QUESTIONS", "4"))
    MAX_ANSWER_PROMPT_LENGTH = int(os.getenv("MAX_ANSWER_PROMPT_LENGTH", "500"))

    # ==================== Session Configuration ====================
    SESSION_EXPIRATION_SECONDS = int(os.getenv("SESSION_EXPIRATION_SECONDS", "3600"))  # 1 hour
    MEMORY_CLEANUP_INTERVAL = int(os.getenv("MEMORY_CLEANUP_INTERVAL", "1800"))  # 30 minutes

    # ==================== AI Service Configuration ====================
    # Groq settings
    GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
    GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    GROQ_TIMEOUT = float(os.getenv("GROQ_TIMEOUT", "30"))
    GROQ_TEMPERATURE = float(os.getenv("GROQ_TEMPERATURE", "0.7"))
    GROQ_MAX_TOKENS = int(os.getenv("GROQ_MAX_TOKENS", "2000"))
    GROQ_TOP_P = float(os.getenv("GROQ_TOP_P", "0.9"))
    GROQ_RETRIES = int(os.getenv("GROQ_RETRIES", "3"))

    # ==================== Scoring Configuration ====================
    SCORING_TEMPERATURE = float(os.getenv("SCORING_TEMPERATURE", "0.3"))
    SCORING_MAX_TOKENS = int(os.getenv("SCORING_MAX_TOKENS", "1500"))

    # ==================== Report Configuration ====================
    PDF_PAGE_SIZE = os.getenv("PDF_PAGE_SIZE", "LETTER")
    REPORT_TITLE = os.getenv("REPORT_TITLE", "GatsIQTest Results")

    @classmethod
    def from_env(cls) -> 'Config':
        """Create config with environment variable overrides"""
        return cls()

    # ==================== Validation ====================
    def validate(self) -> Dict[str, Any]:
        """Validate configuration and return status"""
        issues = []
        warnings = []

        if self.QUESTIONS_PER_TEST < 1:
            issues.append("QUESTIONS_PER_TEST must be at least 1")

        if not (1 <= self.MIN_VALID_QUESTIONS <= max(self.QUESTIONS_PER_TEST, 1)):
            issues.append("MIN_VALID_QUESTIONS must be between 1 and QUESTIONS_PER_TEST")

        if self.GROQ_TIMEOUT <= 0:
            issues.append("GROQ_TIMEOUT must be positive")

        if self.GROQ_RETRIES < 1:
            issues.append("GROQ_RETRIES must be at least 1")

        if self.PDF_PAGE_SIZE.upper() not in ("LETTER", "A4"):
            issues.append("PDF_PAGE_SIZE must be LETTER or A4")

        # Reported, not fatal: surfaces as a configuration error on first use
        if not self.USE_DUMMY_DATA and not self.GROQ_API_KEY:
            warnings.append("GROQ_API_KEY is not set; question generation will fail")

        return {
            "valid": len(issues) == 0,
            "issues": issues,
            "warnings": warnings,
            "config_loaded": True,
            "using_dummy_data": self.USE_DUMMY_DATA
        }

# Global configuration instance
config = Config.from_env()

# Validate on import
validation_result = config.validate()
if not validation_result["valid"]:
    logger = logging.getLogger(__name__)
    logger.warning(f"Configuration issues: {validation_result['issues']}")
