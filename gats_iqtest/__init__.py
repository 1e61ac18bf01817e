# gats_iqtest/__init__.py
"""
GatsIQTest API
IQ-style assessment with AI-generated questions, AI scoring and report export
"""

__version__ = "1.0.0"
__description__ = "IQ assessment service with AI-powered question generation and scoring"

from .core.config import config
from .main import app, create_app

__all__ = ["app", "config", "create_app"]
