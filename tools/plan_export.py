"""
NutriPlan AI — Plan Export Tool
===============================
Turns a GeneratedPlan into a paginated A4 PDF.

Layout is computed first (positions in mm from the top-left corner) and
then drawn with reportlab, so pagination can be checked without parsing
PDF output.
"""

import io
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from agents.schemas import DailyPlan, GeneratedPlan

# =============================================================================
# CONFIGURATION
# =============================================================================
PDF_FILENAME = "my-nutrition-plan.pdf"
PDF_TITLE = "NutriPlan AI - Weekly Plan"

PAGE_WIDTH_MM = A4[0] / mm
PAGE_HEIGHT_MM = A4[1] / mm
MARGIN_MM = 15
TOP_MARGIN_MM = 20
BOTTOM_MARGIN_MM = 12
PAGE_BREAK_Y_MM = 250
CONTENT_WIDTH_MM = PAGE_WIDTH_MM - 2 * MARGIN_MM
MEAL_TEXT_OFFSET_MM = 22

REGULAR = "Helvetica"
BOLD = "Helvetica-Bold"

PURPLE = (128, 0, 128)
ORANGE = (255, 102, 0)
DARK = (60, 60, 60)
GRAY = (100, 100, 100)
BLACK = (0, 0, 0)
RULE = (200, 200, 200)

Color = Tuple[int, int, int]

# Standard fonts draw WinAnsi (cp1252) text only
PDF_ENCODING = "cp1252"
_SUBSTITUTES = {"\u2192": "->", "\u2190": "<-", "\u2264": "<=", "\u2265": ">=", "\u2248": "~"}
_SPACE_RUN = re.compile(r" {2,}")


def pdf_safe(text: str) -> str:
    """Map text onto what the standard fonts can draw, dropping the rest."""
    for src, dst in _SUBSTITUTES.items():
        text = text.replace(src, dst)
    text = text.encode(PDF_ENCODING, errors="ignore").decode(PDF_ENCODING)
    return _SPACE_RUN.sub(" ", text)


@dataclass
class DrawOp:
    kind: str  # "text" | "rule"
    x: float
    y: float
    text: str = ""
    font: str = REGULAR
    size: float = 10
    color: Color = BLACK
    x2: Optional[float] = None


class _Cursor:
    """Tracks pages and the vertical position while laying out."""

    def __init__(self):
        self.pages: List[List[DrawOp]] = [[]]
        self.y = TOP_MARGIN_MM

    def new_page(self) -> None:
        self.pages.append([])
        self.y = TOP_MARGIN_MM

    def add(self, op: DrawOp) -> None:
        op.text = pdf_safe(op.text)
        self.pages[-1].append(op)

    def ensure_room(self, needed_mm: float) -> None:
        if self.y + needed_mm > PAGE_HEIGHT_MM - BOTTOM_MARGIN_MM:
            self.new_page()

    def paragraph(self, text: str, size: float, line_mm: float, color: Color = DARK,
                  x: float = MARGIN_MM, width_mm: float = CONTENT_WIDTH_MM) -> None:
        for line in _wrap(text, REGULAR, size, width_mm):
            if self.y > PAGE_HEIGHT_MM - BOTTOM_MARGIN_MM:
                self.new_page()
            self.add(DrawOp("text", x, self.y, line, REGULAR, size, color))
            self.y += line_mm


def _wrap(text: str, font: str, size: float, width_mm: float) -> List[str]:
    lines = []
    for chunk in pdf_safe(text or "").splitlines() or [""]:
        lines.extend(simpleSplit(chunk, font, size, width_mm * mm) or [""])
    return lines


# =============================================================================
# LAYOUT
# =============================================================================
def _meal_line(name: str, calories: int, protein: str) -> str:
    return f"{name} ({calories} kcal) - {protein}"


def _day_height_mm(day: DailyPlan) -> float:
    meal_width = CONTENT_WIDTH_MM - MEAL_TEXT_OFFSET_MM
    meal_lines = sum(
        len(_wrap(_meal_line(m.name, m.calories, m.protein), REGULAR, 10, meal_width))
        for _, m in day.meals()
    )
    tip_lines = len(_wrap(f"Hydration: {day.hydration_tip}", REGULAR, 10, CONTENT_WIDTH_MM))
    tip_lines += len(_wrap(f"Exercise: {day.exercise_suggestion}", REGULAR, 10, CONTENT_WIDTH_MM))
    return 10 + 10 + meal_lines * 6 + 5 + tip_lines * 6 + 4


def _layout_day(cur: _Cursor, day: DailyPlan) -> None:
    # Several days share a page; start a new one past the threshold or
    # when the section would run off the bottom.
    fits = cur.y + _day_height_mm(day) <= PAGE_HEIGHT_MM - BOTTOM_MARGIN_MM
    if cur.y > PAGE_BREAK_Y_MM or not fits:
        cur.new_page()

    cur.add(DrawOp("rule", MARGIN_MM, cur.y, color=RULE, x2=PAGE_WIDTH_MM - MARGIN_MM))
    cur.y += 10

    cur.add(DrawOp("text", MARGIN_MM, cur.y, day.day, BOLD, 16, PURPLE))
    cur.add(DrawOp("text", MARGIN_MM + 60, cur.y, day.theme, REGULAR, 12, GRAY))
    cur.add(DrawOp("text", PAGE_WIDTH_MM - MARGIN_MM - 40, cur.y,
                   f"Total: {day.total_calories} kcal", REGULAR, 10, DARK))
    cur.y += 10

    meal_width = CONTENT_WIDTH_MM - MEAL_TEXT_OFFSET_MM
    for label, meal in day.meals():
        cur.add(DrawOp("text", MARGIN_MM, cur.y, f"{label}:", BOLD, 10, BLACK))
        for line in _wrap(_meal_line(meal.name, meal.calories, meal.protein), REGULAR, 10, meal_width):
            cur.add(DrawOp("text", MARGIN_MM + MEAL_TEXT_OFFSET_MM, cur.y, line, REGULAR, 10, BLACK))
            cur.y += 6

    cur.y += 5
    cur.paragraph(f"Hydration: {day.hydration_tip}", 10, 6, ORANGE)
    cur.paragraph(f"Exercise: {day.exercise_suggestion}", 10, 6, ORANGE)
    cur.y += 4


def layout_plan_pages(plan: GeneratedPlan) -> List[List[DrawOp]]:
    """Compute draw operations per page."""
    cur = _Cursor()

    cur.add(DrawOp("text", MARGIN_MM, cur.y, PDF_TITLE, BOLD, 22, PURPLE))
    cur.y += 10
    cur.paragraph(plan.summary, 11, 6)
    cur.y += 10

    for heading, body in (
        ("Nutritional Strategy", plan.nutritional_strategy),
        ("Wellbeing Tips", plan.side_effect_management),
    ):
        cur.ensure_room(12)
        cur.add(DrawOp("text", MARGIN_MM, cur.y, heading, BOLD, 14, ORANGE))
        cur.y += 7
        cur.paragraph(body, 10, 5)
        cur.y += 10

    for day in plan.daily_plans:
        _layout_day(cur, day)

    return cur.pages


# =============================================================================
# RENDERING
# =============================================================================
def _rgb(color: Color) -> Tuple[float, float, float]:
    return tuple(c / 255 for c in color)


def render_plan_pdf(plan: GeneratedPlan, compress: bool = False) -> bytes:
    """Draw the plan and return the PDF bytes."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4, pageCompression=1 if compress else 0)
    c.setTitle(PDF_TITLE)

    pages = layout_plan_pages(plan)
    for index, ops in enumerate(pages):
        if index:
            c.showPage()
        for op in ops:
            y_pt = (PAGE_HEIGHT_MM - op.y) * mm
            if op.kind == "rule":
                c.setStrokeColorRGB(*_rgb(op.color))
                c.line(op.x * mm, y_pt, op.x2 * mm, y_pt)
            else:
                c.setFillColorRGB(*_rgb(op.color))
                c.setFont(op.font, op.size)
                c.drawString(op.x * mm, y_pt, op.text)
    c.save()

    print(f"📄 Plan PDF rendered: {len(pages)} page(s)")
    return buffer.getvalue()


# =============================================================================
# TEXT EXTRACTION (uncompressed exports only)
# =============================================================================
_TOKEN = re.compile(rb"\(((?:\\.|[^\\)])*)\)(\s*Tj)?|\bBT\b|\bET\b", re.DOTALL)
_ESCAPE = re.compile(rb"\\([0-7]{1,3}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {b"n": b"\n", b"r": b"\r", b"t": b"\t", b"b": b"\b", b"f": b"\f"}


def _unescape(raw: bytes) -> bytes:
    def repl(match):
        token = match.group(1)
        if token[:1].isdigit():
            return bytes([int(token, 8) & 0xFF])
        return _SIMPLE_ESCAPES.get(token, token)
    return _ESCAPE.sub(repl, raw)


def extract_pdf_text(pdf_bytes: bytes) -> List[str]:
    """One string per text block (BT ... ET), in drawing order."""
    lines: List[str] = []
    current: Optional[List[str]] = None
    for match in _TOKEN.finditer(pdf_bytes):
        token = match.group(0)
        if token == b"BT":
            current = []
        elif token == b"ET":
            if current:
                lines.append("".join(current))
            current = None
        elif match.group(2) and current is not None:
            current.append(_unescape(match.group(1)).decode(PDF_ENCODING, errors="replace"))
    return lines
