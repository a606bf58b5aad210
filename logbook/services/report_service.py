"""PDF logbook export: cover sheet, table of contents and the weekly task table."""

from __future__ import annotations

import base64
import binascii
import datetime
import io
import logging
from typing import List, NamedTuple, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    HRFlowable,
    Image,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from logbook.core.config import get_report_title
from logbook.core.errors import RenderError
from logbook.models import CoverPageData, WeeklyLog
from logbook.services.calendar_service import format_date, format_week_range, group_by_day

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 20 * mm
LOGO_WIDTH = 70 * mm
LOGO_HEIGHT = 30 * mm

TABLE_HEADER = ("Week / Date", "Task Performed", "Skills Applied / Learnt")
NO_TASKS_TEXT = "No tasks recorded for this week."

ROW_TASK = "task"
ROW_EMPTY = "empty"
ROW_SPACER = "spacer"
ROW_CONTINUATION = "continuation"

# 日本語: 1行に載せる最大文字数。超えると継続行に分割 / English: Longest text per table row before it continues on the next row
ROW_TEXT_LIMIT = 1000


class ReportRow(NamedTuple):
    marker: str
    day: str
    task: str
    skills: str
    kind: str


def report_filename(generated_on: datetime.date) -> str:
    return f"Internship_Logbook_{generated_on.isoformat()}.pdf"


def week_marker(log: WeeklyLog) -> str:
    return f"Week {log.week_number}: {format_week_range(log.start_date, log.end_date)}"


def split_row_text(text: str, limit: int = ROW_TEXT_LIMIT) -> List[str]:
    """Break ``text`` into pieces of at most ``limit`` characters, preferring word boundaries."""
    pieces: List[str] = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind(" ", 0, limit + 1)
        if cut <= 0:
            cut = limit
        pieces.append(remaining[:cut].rstrip())
        remaining = remaining[cut:].lstrip()
    pieces.append(remaining)
    return pieces


def build_table_rows(logs: Sequence[WeeklyLog]) -> List[ReportRow]:
    """Flatten logs into table rows, grouped by week then by day.

    The week marker sits on a week's first row and the day label on the
    first row of each day. Text longer than ``ROW_TEXT_LIMIT`` continues
    on extra rows so no single row outgrows a page. A spacer row sits
    between consecutive weeks.
    """
    rows: List[ReportRow] = []
    for index, log in enumerate(logs):
        marker = week_marker(log)
        if not log.tasks:
            rows.append(ReportRow(marker, "", NO_TASKS_TEXT, "", ROW_EMPTY))
        for day_tasks in group_by_day(log.tasks).values():
            day_label = format_date(day_tasks[0].date, with_weekday=True)
            for task in day_tasks:
                content = split_row_text(task.content)
                skills = split_row_text(", ".join(task.skills))
                for part in range(max(len(content), len(skills))):
                    rows.append(
                        ReportRow(
                            marker,
                            day_label,
                            content[part] if part < len(content) else "",
                            skills[part] if part < len(skills) else "",
                            ROW_TASK if part == 0 else ROW_CONTINUATION,
                        )
                    )
                    marker = day_label = ""
        if index < len(logs) - 1:
            rows.append(ReportRow("", "", "", "", ROW_SPACER))
    return rows


def decode_image(source: str | bytes | None) -> bytes | None:
    """Decode a logo given as raw bytes, a ``data:`` URL or bare base64."""
    if source is None or source == "" or source == b"":
        return None
    if isinstance(source, bytes):
        raw = source
    else:
        payload = source.strip()
        if payload.startswith("data:"):
            header, sep, payload = payload.partition(",")
            if not sep or ";base64" not in header:
                raise RenderError("Logo data URL must be base64 encoded")
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise RenderError(f"Logo is not valid base64: {exc}") from exc
    try:
        ImageReader(io.BytesIO(raw)).getSize()
    except Exception as exc:
        raise RenderError(f"Logo could not be decoded as an image: {exc}") from exc
    return raw


class NumberedCanvas(canvas.Canvas):
    """Defers page output until save so every footer knows the total page count."""

    def __init__(self, *args, **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total_pages = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_page_number(total_pages)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def _draw_page_number(self, total_pages: int) -> None:
        page_number = self.getPageNumber()
        # 日本語: 表紙にはページ番号を付けない / English: The cover sheet carries no page number
        if page_number == 1:
            return
        self.setFont("Helvetica", 10)
        self.drawRightString(PAGE_WIDTH - MARGIN, MARGIN / 2, f"Page {page_number} of {total_pages}")


def _styles():
    sample = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "CoverTitle", parent=sample["Title"], fontName="Helvetica-Bold", fontSize=24, leading=30
        ),
        "cover_field": ParagraphStyle(
            "CoverField", parent=sample["Normal"], fontSize=14, leading=20, alignment=TA_CENTER
        ),
        "heading": ParagraphStyle("Heading", parent=sample["Heading1"], fontName="Helvetica-Bold", fontSize=18),
        "toc": ParagraphStyle("Toc", parent=sample["Normal"], fontSize=12, leading=17),
        "toc_entry": ParagraphStyle("TocEntry", parent=sample["Normal"], fontSize=12, leading=17, leftIndent=8 * mm),
        "cell": ParagraphStyle("Cell", parent=sample["Normal"], fontSize=9, leading=12),
        "cell_italic": ParagraphStyle(
            "CellItalic", parent=sample["Normal"], fontName="Helvetica-Oblique", fontSize=9, leading=12
        ),
        "header": ParagraphStyle(
            "HeaderCell", parent=sample["Normal"], fontName="Helvetica-Bold", fontSize=10, textColor=colors.white
        ),
    }


def _cover_story(cover: CoverPageData, styles) -> list:
    institution_logo = decode_image(cover.institution_logo)
    company_logo = decode_image(cover.company_logo)

    story: list = []
    logo_cells = [
        Image(io.BytesIO(raw), width=LOGO_WIDTH, height=LOGO_HEIGHT, kind="proportional") if raw else ""
        for raw in (institution_logo, company_logo)
    ]
    logos = Table([logo_cells], colWidths=[(PAGE_WIDTH - 2 * MARGIN) / 2] * 2, rowHeights=[LOGO_HEIGHT])
    logos.setStyle(
        TableStyle(
            [
                ("ALIGN", (0, 0), (0, 0), "LEFT"),
                ("ALIGN", (1, 0), (1, 0), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 0),
                ("RIGHTPADDING", (0, 0), (-1, -1), 0),
            ]
        )
    )
    story.append(logos)
    story.append(Spacer(1, 30 * mm))
    story.append(Paragraph(escape(get_report_title()), styles["title"]))
    story.append(Spacer(1, 15 * mm))

    def field(label: str, value: str) -> Paragraph:
        return Paragraph(f"{escape(label)}: {escape(value or '')}", styles["cover_field"])

    story.append(field("Student Name", cover.student_name))
    story.append(field("Student ID", cover.student_id))
    story.append(field("Institution", cover.institution))
    story.append(field("Department", cover.department))
    story.append(Spacer(1, 3 * mm))
    story.append(HRFlowable(width="100%", color=colors.Color(0.78, 0.78, 0.78)))
    story.append(Spacer(1, 3 * mm))
    story.append(field("Company", cover.company_name))
    story.append(field("Supervisor", cover.supervisor_name))
    story.append(Spacer(1, 8 * mm))
    story.append(field("Internship Period", _period_text(cover)))
    return story


def _period_text(cover: CoverPageData) -> str:
    start, end = cover.start_date, cover.end_date
    if start and end and start > end:
        raise RenderError("Internship period starts after it ends")
    if start and end:
        return f"{format_date(start)} - {format_date(end)}"
    if start:
        return f"From {format_date(start)}"
    if end:
        return f"Until {format_date(end)}"
    return ""


def _toc_story(logs: Sequence[WeeklyLog], styles) -> list:
    story: list = [Paragraph("Table of Contents", styles["heading"]), Spacer(1, 5 * mm)]
    story.append(Paragraph("1. Cover Page", styles["toc"]))
    story.append(Paragraph("2. Weekly Logs:", styles["toc"]))
    for index, log in enumerate(logs, start=1):
        text = f"{index}. Week {log.week_number} ({format_week_range(log.start_date, log.end_date)})"
        story.append(Paragraph(escape(text), styles["toc_entry"]))
    return story


def _task_table(logs: Sequence[WeeklyLog], styles) -> Table:
    rows = build_table_rows(logs)
    data = [[Paragraph(escape(text), styles["header"]) for text in TABLE_HEADER]]
    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.Color(80 / 255, 80 / 255, 80 / 255)),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ]
    for row_index, row in enumerate(rows, start=1):
        if row.kind == ROW_SPACER:
            data.append(["", "", ""])
            commands.append(("SPAN", (0, row_index), (-1, row_index)))
            commands.append(("BACKGROUND", (0, row_index), (-1, row_index), colors.white))
            continue
        task_style = styles["cell_italic"] if row.kind == ROW_EMPTY else styles["cell"]
        labels = []
        if row.marker:
            labels.append(f"<b>{escape(row.marker)}</b>")
        if row.day:
            labels.append(escape(row.day))
        data.append(
            [
                Paragraph("<br/>".join(labels), styles["cell"]),
                Paragraph(escape(row.task), task_style),
                Paragraph(escape(row.skills), styles["cell"]),
            ]
        )
        if not labels:
            # 日本語: 同じ日の2行目以降は上罫線を消して結合セル風に見せる / English: Hide the label rule so the day reads as one merged cell
            commands.append(("LINEABOVE", (0, row_index), (0, row_index), 0.5, colors.white))
        if row.kind == ROW_CONTINUATION:
            commands.append(("LINEABOVE", (1, row_index), (-1, row_index), 0.5, colors.white))

    content_width = PAGE_WIDTH - 2 * MARGIN
    table = Table(
        data,
        colWidths=[45 * mm, content_width - 95 * mm, 50 * mm],
        repeatRows=1,
    )
    table.setStyle(TableStyle(commands))
    return table


def render(
    logs: Sequence[WeeklyLog],
    cover: CoverPageData,
    *,
    generated_on: datetime.date | None = None,
) -> bytes:
    """Render the logbook PDF. ``logs`` must already be oldest week first.

    ``generated_on`` is the only time-dependent input; identical arguments
    produce identical bytes.
    """
    generated_on = generated_on or datetime.date.today()
    styles = _styles()

    # 日本語: 表紙の検証 (画像デコード含む) は出力開始前に行う / English: Cover validation, including image decoding, happens before any output
    story = _cover_story(cover, styles)
    story.append(PageBreak())
    story.extend(_toc_story(logs, styles))
    story.append(PageBreak())
    story.append(Paragraph("Weekly Logs", styles["heading"]))
    story.append(Spacer(1, 3 * mm))
    story.append(_task_table(logs, styles))

    def _draw_cover_footer(pdf_canvas, _doc):
        pdf_canvas.saveState()
        pdf_canvas.setFont("Helvetica", 10)
        pdf_canvas.drawCentredString(PAGE_WIDTH / 2, MARGIN, f"Generated on {format_date(generated_on)}")
        pdf_canvas.restoreState()

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title="Internship Logbook",
        author=cover.student_name or "",
        invariant=True,
    )
    try:
        doc.build(story, onFirstPage=_draw_cover_footer, canvasmaker=NumberedCanvas)
    except RenderError:
        raise
    except Exception as exc:
        logger.exception("Logbook rendering failed")
        raise RenderError(f"Failed to render logbook: {exc}") from exc

    pdf_bytes = buffer.getvalue()
    logger.info("Rendered logbook with %d weeks (%d bytes)", len(logs), len(pdf_bytes))
    return pdf_bytes
