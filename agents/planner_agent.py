"""
NutriPlan AI — Planner Agent (Plan Generation Gateway)
======================================================
- Builds the nutrition prompt from a UserProfile
- Calls Gemini with a strict JSON response schema
- Strips code fences, parses, validates into a GeneratedPlan
- Every failure surfaces as one PlanGenerationError
"""

import json
import os
import re
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from google import genai
from google.genai import types
from pydantic import ValidationError

from agents.schemas import GeneratedPlan, UserProfile

# =============================================================================
# CONFIGURATION
# =============================================================================
load_dotenv()

API_KEY_ENV = "GOOGLE_API_KEY"
DEFAULT_MODEL = os.getenv("NUTRIPLAN_MODEL", "gemini-2.5-flash")
PLAN_LANGUAGE = os.getenv("NUTRIPLAN_LANGUAGE", "English")

# Day totals further than this from the meal sum get logged
CALORIE_MISMATCH_TOLERANCE = 50

GENERATION_FAILED_MESSAGE = "Failed to generate the plan. Please try again."


class PlanGenerationError(Exception):
    """Uniform failure raised for any problem producing a plan."""

    def __init__(self, message: str = GENERATION_FAILED_MESSAGE):
        super().__init__(message)


def get_api_key() -> Optional[str]:
    return os.getenv(API_KEY_ENV)


def get_gemini_client() -> genai.Client:
    """Create a Gemini client, failing loudly when the key is missing."""
    api_key = get_api_key()
    if not api_key:
        raise PlanGenerationError(f"{API_KEY_ENV} not configured")
    return genai.Client(api_key=api_key)


print(f"📋 Planner Agent: model={DEFAULT_MODEL}, key={'set' if get_api_key() else 'missing'}")


# =============================================================================
# RESPONSE SCHEMA (provider side)
# =============================================================================
def _meal_schema() -> Dict[str, Any]:
    return {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING"},
            "description": {"type": "STRING"},
            "calories": {"type": "INTEGER"},
            "protein": {"type": "STRING"},
        },
        "required": ["name", "description", "calories", "protein"],
    }


PLAN_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "STRING",
            "description": "A motivating, strategic overview of the weekly plan for the user.",
        },
        "nutritionalStrategy": {
            "type": "STRING",
            "description": "The nutritional strategy adopted (e.g. protein focus, low glycemic index).",
        },
        "sideEffectManagement": {
            "type": "STRING",
            "description": "Wellbeing, digestion and energy tips.",
        },
        "dailyPlans": {
            "type": "ARRAY",
            "description": "Detailed plan for 7 days.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "day": {"type": "STRING", "description": "Day name (e.g. Monday)"},
                    "theme": {"type": "STRING", "description": "Focus of the day (e.g. Recovery, High Protein)"},
                    "totalCalories": {
                        "type": "INTEGER",
                        "description": "Sum of the calories of all meals of the day.",
                    },
                    "hydrationTip": {"type": "STRING", "description": "Hydration tip for the day"},
                    "exerciseSuggestion": {"type": "STRING", "description": "Compatible physical activity"},
                    "breakfast": _meal_schema(),
                    "lunch": _meal_schema(),
                    "snack": _meal_schema(),
                    "dinner": _meal_schema(),
                },
                "required": [
                    "day", "theme", "totalCalories", "breakfast", "lunch",
                    "snack", "dinner", "hydrationTip", "exerciseSuggestion",
                ],
            },
        },
    },
    "required": ["summary", "dailyPlans", "nutritionalStrategy", "sideEffectManagement"],
}


# =============================================================================
# PROMPT
# =============================================================================
def build_plan_prompt(profile: UserProfile, language: str = PLAN_LANGUAGE) -> str:
    """Render the nutritionist prompt with every profile field."""
    return f"""
Act as an elite clinical nutritionist and lifestyle coach focused on
high-performance weight loss and dietary re-education.

Create a highly personalized weekly plan for the following client:

Name: {profile.name}
Age: {profile.age}
Gender: {profile.gender.value}
Height: {profile.height:g} cm
Current Weight: {profile.current_weight:g} kg
Goal Weight: {profile.goal_weight:g} kg
Activity Level: {profile.activity_level.value}
Main Goal: {profile.goal.value}
Dietary Restrictions: {profile.dietary_restrictions.strip() or "None"}
Water Intake Preference: {profile.water_intake or "Not specified"}

IMPORTANT GUIDELINES:
1. Calculate and include the TOTAL DAILY CALORIES (totalCalories) for each day, adequate to the client's weight goal.
2. Prioritize protein intake to preserve lean mass.
3. Focus on hydration and food quality.
4. Meals must be nutrient dense and rich in fibre for gut health.
5. The plan must be natural and sustainable.
6. The tone must be professional, encouraging and objective.
7. DO NOT mention medications, injections or any specific drugs. Focus only on nutrition and habits.
8. Write everything in {language}.
"""


# =============================================================================
# PARSING
# =============================================================================
_LEADING_FENCE = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` wrapper the model sometimes adds."""
    text = _LEADING_FENCE.sub("", text)
    return _TRAILING_FENCE.sub("", text).strip()


def parse_plan_response(text: Optional[str]) -> GeneratedPlan:
    if not text or not text.strip():
        raise PlanGenerationError("No response text generated")

    try:
        payload = json.loads(strip_code_fences(text))
        plan = GeneratedPlan.model_validate(payload)
    except json.JSONDecodeError as e:
        print(f"❌ Plan response is not valid JSON: {e}")
        raise PlanGenerationError() from e
    except ValidationError as e:
        print(f"❌ Plan response failed schema validation: {e.error_count()} error(s)")
        raise PlanGenerationError() from e

    _log_calorie_mismatches(plan)
    return plan


def _log_calorie_mismatches(plan: GeneratedPlan) -> None:
    for day in plan.daily_plans:
        drift = abs(day.total_calories - day.meal_calorie_sum)
        if drift > CALORIE_MISMATCH_TOLERANCE:
            print(
                f"⚠️ {day.day}: totalCalories={day.total_calories} "
                f"but meals sum to {day.meal_calorie_sum}"
            )


# =============================================================================
# MAIN GATEWAY FUNCTION
# =============================================================================
def generate_diet_plan(
    profile: UserProfile,
    client: Optional[Any] = None,
    model: str = DEFAULT_MODEL,
) -> GeneratedPlan:
    """
    Generate a 7-day plan for the profile.

    Raises:
        PlanGenerationError: missing key, SDK/network error, malformed JSON
            or schema violation. The message is always the user-facing one.
    """
    try:
        client = client or get_gemini_client()
        response = client.models.generate_content(
            model=model,
            contents=build_plan_prompt(profile),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=PLAN_RESPONSE_SCHEMA,
            ),
        )
        plan = parse_plan_response(getattr(response, "text", None))
    except PlanGenerationError as e:
        if str(e) != GENERATION_FAILED_MESSAGE:
            print(f"❌ Gemini plan generation failed: {e}")
            raise PlanGenerationError() from e
        raise
    except Exception as e:
        print(f"❌ Gemini API Error: {e}")
        raise PlanGenerationError() from e

    print(f"✅ Plan generated for {profile.name or 'anonymous user'}")
    return plan


__all__ = [
    "PlanGenerationError",
    "PLAN_RESPONSE_SCHEMA",
    "GENERATION_FAILED_MESSAGE",
    "build_plan_prompt",
    "strip_code_fences",
    "parse_plan_response",
    "generate_diet_plan",
    "get_gemini_client",
    "get_api_key",
]
