"""
Business logic services for test orchestration and report generation
"""

from .assessment_service import AssessmentService
from .report_service import ReportService

__all__ = [
    "AssessmentService",
    "ReportService"
]
