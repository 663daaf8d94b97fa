# unit_tests/test_ui_cards.py
"""
Unit Tests for Plan View Cards
==============================
Run with: python -m pytest unit_tests/test_ui_cards.py -v
"""

from agents.schemas import Meal
from ui.cards import calorie_badge_html, meal_card_html, text_card_html


def test_meal_text_is_escaped():
    print("\n" + "="*60)
    print("TEST 1: Meal Card Escaping")
    print("="*60)

    meal = Meal(
        name="Fish & <Chips>",
        description="Use <b>less</b> oil <div>",
        calories=420,
        protein="30g <script>",
    )
    snippet = meal_card_html("Lunch", meal)

    assert "Fish &amp; &lt;Chips&gt;" in snippet
    assert "Use &lt;b&gt;less&lt;/b&gt; oil &lt;div&gt;" in snippet
    assert "<script>" not in snippet
    assert "Lunch · 420 kcal" in snippet
    assert snippet.count("<div") == 2
    print("✅ Markup in model text is inert")


def test_text_card_escapes_title_and_body():
    snippet = text_card_html("Tips <1>", 'Drink "water" & rest')

    assert "<h4>Tips &lt;1&gt;</h4>" in snippet
    assert "Drink &quot;water&quot; &amp; rest" in snippet


def test_calorie_badge():
    assert calorie_badge_html(1550) == '<span class="kcal-badge">🔥 1550 kcal</span>'
