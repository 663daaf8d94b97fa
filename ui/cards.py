# ui/cards.py
"""
HTML snippets for the plan view. Model-generated text is always escaped
before it is placed inside markup.
"""

import html

from agents.schemas import Meal


def card_html(title: str, body_html: str) -> str:
    return (
        f'<div class="plan-card"><h4>{html.escape(title)}</h4>'
        f"<div>{body_html}</div></div>"
    )


def text_card_html(title: str, text: str) -> str:
    return card_html(title, html.escape(text))


def meal_card_html(label: str, meal: Meal) -> str:
    body = (
        f"<b>{html.escape(meal.name)}</b><br>"
        f"{html.escape(meal.description)}<br>"
        f"<small>Protein: {html.escape(meal.protein)}</small>"
    )
    return card_html(f"{label} · {meal.calories} kcal", body)


def calorie_badge_html(total_calories: int) -> str:
    return f'<span class="kcal-badge">🔥 {int(total_calories)} kcal</span>'


__all__ = ["card_html", "text_card_html", "meal_card_html", "calorie_badge_html"]
