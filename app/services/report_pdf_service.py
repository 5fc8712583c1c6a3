"""
PDF report of a completed assessment: scores and the career analysis
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from app.services.assessment_engine.scoring import SCORE_KEYS

ACCENT = (45, 115, 245)
TEXT = (34, 34, 34)
MUTED = (100, 100, 100)
RULE = (230, 230, 230)

SECTION_TITLES = {
    "interest": "Career Interests (RIASEC)",
    "aptitude": "Aptitude",
    "personality": "Personality (Big Five)",
    "academic": "Academic Profile",
}


def _latin1(text: Any) -> str:
    # Core PDF fonts only cover latin-1
    return str(text if text is not None else "").encode("latin-1", "replace").decode("latin-1")


def _format_datetime(value: Optional[datetime]) -> str:
    if not value:
        return "-"
    return value.strftime("%d %b %Y")


def _label(key: str) -> str:
    return key.replace("_", " ").title()


def _effective_width(pdf: FPDF) -> float:
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _section_title(pdf: FPDF, title: str) -> None:
    pdf.ln(3)
    pdf.set_text_color(*TEXT)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 9, _latin1(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _paragraph(pdf: FPDF, text: str, size: int = 10, color: Tuple[int, int, int] = TEXT) -> None:
    pdf.set_text_color(*color)
    pdf.set_font("Helvetica", "", size)
    pdf.multi_cell(0, 5.5, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _bullets(pdf: FPDF, items: Iterable[Any]) -> None:
    for item in items or []:
        _paragraph(pdf, f"- {item}")


def _score_table(pdf: FPDF, values: Dict[str, Any], keys: Iterable[str]) -> None:
    width = _effective_width(pdf)
    label_width = width * 0.45
    bar_width = width * 0.4
    for key in keys:
        value = values.get(key) or 0
        pdf.set_text_color(*TEXT)
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(label_width, 6, _latin1(_label(key)), new_x=XPos.RIGHT, new_y=YPos.TOP)
        x, y = pdf.get_x(), pdf.get_y()
        pdf.set_fill_color(*RULE)
        pdf.rect(x, y + 1.5, bar_width, 3, style="F")
        pdf.set_fill_color(*ACCENT)
        pdf.rect(x, y + 1.5, bar_width * max(0, min(100, value)) / 100.0, 3, style="F")
        pdf.set_x(x + bar_width + 2)
        pdf.cell(0, 6, f"{value}/100", new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _career_paths(pdf: FPDF, paths: List[Dict[str, Any]]) -> None:
    for path in paths or []:
        pdf.set_text_color(*ACCENT)
        pdf.set_font("Helvetica", "B", 11)
        header = f"{path.get('ranking', '')}. {path.get('title', '')}".lstrip(". ")
        pdf.cell(0, 7, _latin1(f"{header}  ({path.get('matchScore', '')})"),
                 new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if path.get("description"):
            _paragraph(pdf, path["description"])
        if path.get("requiredEducation"):
            _paragraph(pdf, f"Education: {path['requiredEducation']}", color=MUTED)
        if path.get("entranceExams"):
            _paragraph(pdf, f"Entrance exams: {', '.join(path['entranceExams'])}", color=MUTED)
        if path.get("topColleges"):
            _paragraph(pdf, f"Top colleges: {', '.join(path['topColleges'])}", color=MUTED)
        pdf.ln(1)


def render_report(assessment, user, analysis: Optional[Dict[str, Any]]) -> bytes:
    """
    Render the completion report.

    Args:
        assessment: Completed Assessment with scores
        user: Owning User
        analysis: Career analysis dict (AI or fallback), may be None

    Returns:
        PDF document bytes
    """
    analysis = analysis or {}
    scores = assessment.scores or {}

    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    pdf.set_text_color(*ACCENT)
    pdf.set_font("Helvetica", "B", 18)
    pdf.cell(0, 12, "Career Assessment Report", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    _paragraph(pdf, f"{user.name}  |  Completed {_format_datetime(assessment.completed_at)}", color=MUTED)

    if analysis.get("summary"):
        _section_title(pdf, "Summary")
        _paragraph(pdf, analysis["summary"])

    stream = analysis.get("recommendedStream")
    if stream:
        _section_title(pdf, "Recommended Stream")
        if isinstance(stream, dict):
            _paragraph(pdf, stream.get("primary", ""), size=12)
            if stream.get("reasoning"):
                _paragraph(pdf, stream["reasoning"], color=MUTED)
            if stream.get("alternatives"):
                _paragraph(pdf, f"Alternatives: {', '.join(stream['alternatives'])}", color=MUTED)
        else:
            _paragraph(pdf, stream, size=12)

    for group, keys in SCORE_KEYS.items():
        _section_title(pdf, SECTION_TITLES[group])
        _score_table(pdf, scores.get(group) or {}, keys)

    if analysis.get("careerPaths"):
        _section_title(pdf, "Career Paths")
        _career_paths(pdf, analysis["careerPaths"])

    if analysis.get("strengths"):
        _section_title(pdf, "Strengths")
        _bullets(pdf, analysis["strengths"])

    if analysis.get("developmentAreas"):
        _section_title(pdf, "Areas for Development")
        _bullets(pdf, analysis["developmentAreas"])

    plan = analysis.get("actionPlan") or {}
    if plan:
        _section_title(pdf, "Action Plan")
        for key, title in (("immediate", "Immediate"), ("shortTerm", "Next 6 months"), ("longTerm", "Longer term")):
            if plan.get(key):
                pdf.set_font("Helvetica", "B", 10)
                pdf.cell(0, 6, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
                _bullets(pdf, plan[key])

    return bytes(pdf.output())
