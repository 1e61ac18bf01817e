# gats_iqtest/services/report_service.py
import io
import logging
import re
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from ..core.config import config
from ..core.utils import DateTimeUtils, report_filename
from ..models.schemas import Answer, IQTestResult, UserProfile

logger = logging.getLogger(__name__)

_PAGE_SIZES = {"LETTER": LETTER, "A4": A4}

# C0 and C1 control characters, DEL included
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")

def _clean(value) -> str:
    """Single-line field value without control characters"""
    text = "" if value is None else str(value)
    return " ".join(_CONTROL_CHARS.sub(" ", text).split())

def _paragraphs(text: str) -> List[str]:
    blocks = re.split(r"\n\s*\n", (text or "").replace("\r\n", "\n"))
    return [cleaned for cleaned in (_clean(block) for block in blocks) if cleaned]

class ReportService:
    """Renders a finished test as a downloadable report"""

    def __init__(self, title: Optional[str] = None, page_size: Optional[str] = None):
        self.title = title or config.REPORT_TITLE
        self.page_size = _PAGE_SIZES.get((page_size or config.PDF_PAGE_SIZE).upper(), LETTER)

    def render_text(self, profile: UserProfile, result: IQTestResult,
                    answers: Optional[List[Answer]] = None,
                    generated_at: Optional[float] = None) -> str:
        """Plain-text report. Lines are separated by \\n only."""
        if generated_at is None:
            generated_at = DateTimeUtils.get_current_timestamp()

        lines = [
            _clean(self.title),
            f"Generated: {DateTimeUtils.format_timestamp(generated_at)}",
            "",
            f"Name: {_clean(profile.name)}",
            f"Age: {profile.age}",
            f"Country: {_clean(profile.country)}",
            f"Gender: {_clean(profile.gender) or 'Not specified'}",
            f"School: {_clean(profile.school)}",
            "",
            f"IQ Score: {result.iq_score}",
            f"Category: {_clean(result.iq_category)}",
            f"Percentile: {result.percentile}",
            "",
            "Performance:",
        ]
        lines.extend(f"{_clean(p.category)}: {p.percentage}%" for p in result.performance)

        if answers:
            lines.extend(["", "Answers:"])
            lines.extend(f"{_clean(a.question_id)}: {_clean(a.answer)}" for a in answers)

        lines.extend(["", "Explanation:"])
        lines.append("\n\n".join(_paragraphs(result.explanation)))

        return "\n".join(lines) + "\n"

    def render_pdf(self, profile: UserProfile, result: IQTestResult,
                   answers: Optional[List[Answer]] = None) -> bytes:
        """Generate PDF report"""
        try:
            pdf_buffer = io.BytesIO()
            doc = SimpleDocTemplate(pdf_buffer, pagesize=self.page_size, title=self.title)
            styles = getSampleStyleSheet()
            story = []

            story.append(Paragraph(escape(f"{self.title} - {_clean(profile.name)}"), styles['Title']))
            story.append(Spacer(1, 12))

            info_lines = [
                f"Age: {profile.age}",
                f"Country: {_clean(profile.country)}",
                f"Gender: {_clean(profile.gender) or 'Not specified'}",
                f"School: {_clean(profile.school)}",
                f"Date: {DateTimeUtils.format_timestamp(DateTimeUtils.get_current_timestamp())}",
            ]
            story.append(Paragraph("<br/>".join(escape(line) for line in info_lines), styles['Normal']))
            story.append(Spacer(1, 12))

            story.append(Paragraph("Score", styles['Heading2']))
            score_lines = [
                f"IQ Score: {result.iq_score}",
                f"Category: {_clean(result.iq_category)}",
                f"Percentile: {result.percentile}",
            ]
            story.append(Paragraph("<br/>".join(escape(line) for line in score_lines), styles['Normal']))
            story.append(Spacer(1, 12))

            if result.performance:
                story.append(Paragraph("Performance", styles['Heading2']))
                perf_lines = [f"{_clean(p.category)}: {p.percentage}%" for p in result.performance]
                story.append(Paragraph("<br/>".join(escape(line) for line in perf_lines), styles['Normal']))
                story.append(Spacer(1, 12))

            if answers:
                story.append(Paragraph("Answers", styles['Heading2']))
                answer_lines = [f"{_clean(a.question_id)}: {_clean(a.answer)}" for a in answers]
                story.append(Paragraph("<br/>".join(escape(line) for line in answer_lines), styles['Normal']))
                story.append(Spacer(1, 12))

            story.append(Paragraph("Explanation", styles['Heading2']))
            for para in _paragraphs(result.explanation):
                story.append(Paragraph(escape(para), styles['Normal']))
                story.append(Spacer(1, 6))

            doc.build(story)
            pdf_buffer.seek(0)
            return pdf_buffer.read()

        except Exception as e:
            logger.error(f"❌ PDF generation error: {e}")
            raise Exception(f"PDF generation failed: {e}") from e

    def export(self, profile: UserProfile, result: IQTestResult,
               answers: Optional[List[Answer]] = None, fmt: str = "pdf"):
        """Return (payload bytes, filename, media type)"""
        if fmt == "txt":
            body = self.render_text(profile, result, answers).encode("utf-8")
            return body, report_filename(profile.name, "txt"), "text/plain; charset=utf-8"
        if fmt == "pdf":
            return self.render_pdf(profile, result, answers), report_filename(profile.name, "pdf"), "application/pdf"
        raise ValueError(f"Unsupported report format: {fmt}")
