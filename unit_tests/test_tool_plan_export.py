# unit_tests/test_tool_plan_export.py
"""
Unit Tests for Plan Export Tool
===============================
Run with: python -m pytest unit_tests/test_tool_plan_export.py -v
"""

from agents.schemas import GeneratedPlan
from tools.plan_export import (
    BOTTOM_MARGIN_MM,
    PAGE_BREAK_Y_MM,
    PAGE_HEIGHT_MM,
    PDF_TITLE,
    TOP_MARGIN_MM,
    extract_pdf_text,
    pdf_safe,
    layout_plan_pages,
    render_plan_pdf,
)


def _day_pages(pages, plan):
    """Map each day label to the page index its heading is on."""
    labels = {d.day for d in plan.daily_plans}
    found = {}
    for index, ops in enumerate(pages):
        for op in ops:
            if op.kind == "text" and op.text in labels and op.size == 16:
                found[op.text] = index
    return found


def test_layout_paginates(plan):
    print("\n" + "="*60)
    print("TEST 1: Pagination")
    print("="*60)

    pages = layout_plan_pages(plan)
    day_pages = _day_pages(pages, plan)

    assert len(pages) > 1
    assert list(day_pages) == [d.day for d in plan.daily_plans]
    assert sorted(day_pages.values()) == list(day_pages.values())
    # At least one page holds more than one day
    counts = [list(day_pages.values()).count(i) for i in range(len(pages))]
    assert max(counts) >= 2

    for ops in pages:
        for op in ops:
            assert TOP_MARGIN_MM <= op.y <= PAGE_HEIGHT_MM - BOTTOM_MARGIN_MM + 6
    print(f"✅ {len(pages)} pages, days per page: {counts}")


def test_day_sections_start_above_threshold(plan):
    for ops in layout_plan_pages(plan):
        for op in ops:
            if op.kind == "rule":
                assert op.y <= PAGE_BREAK_Y_MM


def test_day_section_contents(plan):
    first_page_texts = [op.text for op in layout_plan_pages(plan)[0] if op.kind == "text"]
    day = plan.daily_plans[0]

    assert first_page_texts[0] == PDF_TITLE
    assert f"Total: {day.total_calories} kcal" in first_page_texts
    for label in ("Breakfast:", "Lunch:", "Snack:", "Dinner:"):
        assert label in first_page_texts
    assert f"{day.lunch.name} ({day.lunch.calories} kcal) - {day.lunch.protein}" in first_page_texts
    assert f"Hydration: {day.hydration_tip}" in first_page_texts
    assert f"Exercise: {day.exercise_suggestion}" in first_page_texts


def test_pdf_round_trip(plan):
    print("\n" + "="*60)
    print("TEST 2: PDF Text Round Trip")
    print("="*60)

    pdf = render_plan_pdf(plan)
    assert pdf.startswith(b"%PDF")

    text = "\n".join(extract_pdf_text(pdf))
    for day in plan.daily_plans:
        assert day.day in text
        assert f"Total: {day.total_calories} kcal" in text
        for _, meal in day.meals():
            assert meal.name in text
            assert f"({meal.calories} kcal)" in text
    print("✅ Labels, meal names and calories recovered")


def test_long_text_wraps_across_pages(plan_payload):
    plan_payload["summary"] = "Consistency beats intensity. " * 300
    plan = GeneratedPlan.model_validate(plan_payload)

    pages = layout_plan_pages(plan)
    for ops in pages:
        for op in ops:
            assert op.y <= PAGE_HEIGHT_MM - BOTTOM_MARGIN_MM + 6
    assert len(render_plan_pdf(plan, compress=True)) > 0


def test_typographic_text_round_trip(plan_payload):
    """Curly quotes and dashes survive; unsupported symbols are mapped or dropped."""
    print("\n" + "="*60)
    print("TEST 3: Typographic Characters In The PDF")
    print("="*60)

    plan_payload["dailyPlans"][0]["breakfast"]["name"] = "Chef’s Oats – Berry"
    plan_payload["dailyPlans"][0]["lunch"]["name"] = "Bowl 🥗 → Power"
    plan = GeneratedPlan.model_validate(plan_payload)

    lines = extract_pdf_text(render_plan_pdf(plan))

    assert "Chef’s Oats – Berry (350 kcal) - 25g" in lines
    assert "Bowl -> Power (550 kcal) - 40g" in lines
    assert not any("🥗" in line for line in lines)
    print("✅ cp1252 text recovered intact")


def test_pdf_safe():
    assert pdf_safe("Chef’s – “best”") == "Chef’s – “best”"
    assert pdf_safe("Eat 🍎 daily → win") == "Eat daily -> win"
    assert pdf_safe("plain text") == "plain text"
