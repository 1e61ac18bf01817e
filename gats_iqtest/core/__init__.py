"""
Core module containing configuration, AI gateway, extraction and session state
"""

from .config import config
from .ai_services import TextGateway, GroqGateway, DummyGateway, build_gateway
from .answers import AnswerSet
from .session import IQTestSession, SessionState, Navigation

__all__ = [
    "config",
    "TextGateway",
    "GroqGateway",
    "DummyGateway",
    "build_gateway",
    "AnswerSet",
    "IQTestSession",
    "SessionState",
    "Navigation"
]
