from __future__ import annotations  # Styled PDF rendering for interview reports

from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .models import ReportRecord

DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:  # Parse ISO timestamp, None when malformed
    if not value:
        return None
    try:
        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _format_datetime(value: Optional[datetime]) -> str:  # Format timestamp for display
    if not value:
        return "-"
    return value.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _score_value(value: float) -> str:
    return f"{float(value):.2f}/5"


class ReportPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args: Any, accent: Tuple[int, int, int] = ACCENT, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Interview Practice Report"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_unicode_font(self) -> None:  # Switch to DejaVu when the system font is installed
        if not (Path(DEJAVU_SANS).is_file() and Path(DEJAVU_SANS_BOLD).is_file()):
            return
        self.add_font("DejaVu", "", DEJAVU_SANS)
        self.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True

    def prepare_text(self, text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        if self.supports_unicode:
            return value
        cleaned = value.replace("•", "-").replace("–", "-").replace("—", "-")
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def bullet(self) -> str:
        return "•" if self.supports_unicode else "-"

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            line_height = 8
            self.set_font(self.font_bold, "B", 16)
            lines = self.multi_cell(usable, line_height, self.prepare_text(self.header_title), dry_run=True, output="LINES")
            banner = 6 + max(1, len(lines)) * line_height + 4
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, banner, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 6)
            self.multi_cell(usable, line_height, self.prepare_text(self.header_title))
            self.set_text_color(*TEXT)
            self.ln(4)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.multi_cell(usable, 6, self.prepare_text(self.header_title))
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self.font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(0, 9, pdf.prepare_text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.cell(col, line, pdf.prepare_text(left[0]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.prepare_text(right[0]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf.font_bold, "B", 11)
        pdf.cell(col, line, pdf.prepare_text(left[1]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.prepare_text(right[1]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_table(pdf: ReportPDF, headers: Sequence[str], rows: Sequence[Tuple[str, str]]) -> None:  # Two-column striped table
    widths = [_effective_width(pdf) * 0.6, _effective_width(pdf) * 0.4]
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf.font_bold, "B", 10)
    for idx, title in enumerate(headers):
        pdf.cell(widths[idx], 8, pdf.prepare_text(title), align="L", fill=True)
    pdf.ln(8)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf.font_regular, "", 10)
    for idx, (label, value) in enumerate(rows):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(247, 250, 255)
        pdf.set_x(pdf.l_margin)
        pdf.cell(widths[0], 7, pdf.prepare_text(label), border=0, fill=fill)
        pdf.cell(widths[1], 7, pdf.prepare_text(value), border=0, fill=fill)
        pdf.ln(7)
    pdf.ln(2)


def _render_bullets(pdf: ReportPDF, items: Sequence[str], empty: str) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_regular, "", 11)
    if not items:
        pdf.set_text_color(*MUTED)
        pdf.multi_cell(_effective_width(pdf), 6, pdf.prepare_text(empty))
        pdf.set_text_color(*TEXT)
        pdf.ln(2)
        return
    pdf.set_text_color(*TEXT)
    for item in items:
        pdf.set_x(pdf.l_margin)
        pdf.multi_cell(_effective_width(pdf), 6, pdf.prepare_text(f"{pdf.bullet()} {item}"))
    pdf.ln(2)


def _render_score_banner(pdf: ReportPDF, overall: float) -> None:  # Highlight overall average
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, pdf.get_y(), _effective_width(pdf), 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, pdf.get_y() + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.cell(_effective_width(pdf) - 12, 6, "Overall Average Score")
    pdf.set_xy(pdf.l_margin, pdf.get_y() - 2)
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 14)
    pdf.cell(_effective_width(pdf) - 6, 8, _score_value(overall), align="R")
    pdf.ln(12)
    pdf.set_text_color(*TEXT)


def _render_assessments(pdf: ReportPDF, report: ReportRecord) -> None:  # Question and assessment blocks
    if not report.narrative.perQuestion:
        _render_bullets(pdf, [], "No per-question feedback recorded.")
        return
    width = _effective_width(pdf)
    for index, item in enumerate(report.narrative.perQuestion, start=1):
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*ACCENT)
        pdf.set_font(pdf.font_bold, "B", 10)
        pdf.multi_cell(width, 5.5, pdf.prepare_text(f"Q{index}: {item.question.strip() or '-'}"))
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(60, 60, 60)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.multi_cell(width, 5.5, pdf.prepare_text(item.assessment.strip() or "-"))
        pdf.set_draw_color(*RULE)
        pdf.set_line_width(0.2)
        y = pdf.get_y() + 1
        pdf.line(pdf.l_margin, y, pdf.l_margin + width, y)
        pdf.set_y(y + 3)
    pdf.set_text_color(*TEXT)


def generate_report_pdf(report: ReportRecord) -> bytes:  # Build PDF payload for a report
    pdf = ReportPDF()
    pdf.use_unicode_font()
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Overview")
    _meta_block(
        pdf,
        [
            ("Interview ID", report.interview_id),
            ("Report ID", report.report_id),
            ("Questions", str(report.summary.totalQuestions)),
            ("Created", _format_datetime(_parse_datetime(report.created_at))),
            ("Hireability", f"{report.narrative.hireability}/100"),
            ("Feedback", "Generated" if report.narrative.source == "model" else "Templated"),
        ],
    )
    _render_score_banner(pdf, report.scores.overall)

    _section_title(pdf, "Scores")
    _render_table(
        pdf,
        ["Dimension", "Average"],
        [
            ("Technical depth", _score_value(report.scores.technicalDepth)),
            ("Clarity", _score_value(report.scores.clarity)),
            ("Confidence", _score_value(report.scores.confidence)),
            ("Overall", _score_value(report.scores.overall)),
        ],
    )

    _section_title(pdf, "Flags")
    _render_table(
        pdf,
        ["Flag", "Count"],
        [
            ("Reading from a script", str(report.flags.readingCount)),
            ("Long silences", str(report.flags.silenceCount)),
            ("Irrelevant answers", str(report.flags.irrelevantCount)),
            ("Total", str(report.flags.totalFlags)),
        ],
    )

    _section_title(pdf, "Summary")
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_regular, "", 11)
    pdf.multi_cell(_effective_width(pdf), 6, pdf.prepare_text(report.narrative.summary or "-"))
    pdf.ln(2)

    _section_title(pdf, "Strengths")
    _render_bullets(pdf, report.summary.strengths, "No strengths recorded.")
    _section_title(pdf, "Areas to Improve")
    _render_bullets(pdf, report.summary.weaknesses, "No weaknesses recorded.")
    _section_title(pdf, "Recommendations")
    _render_bullets(pdf, report.summary.recommendations, "No recommendations recorded.")

    _section_title(pdf, "Question Feedback")
    _render_assessments(pdf, report)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "generate_report_pdf"]
