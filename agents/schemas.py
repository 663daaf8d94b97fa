"""
NutriPlan AI — Data Model
=========================
Pydantic models shared by the wizard, the planner, the coach and the
progress log. Field aliases are the camelCase names used on the wire
(Gemini responses and the durable progress store).
"""

from enum import Enum
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================
class Gender(str, Enum):
    FEMALE = "Female"
    MALE = "Male"
    OTHER = "Other"


class ActivityLevel(str, Enum):
    """Activity levels, valued with the description shown to the model."""
    SEDENTARY = "Sedentary (little or no exercise)"
    LIGHT = "Lightly active (light exercise 1-3 days/week)"
    MODERATE = "Moderately active (moderate exercise 3-5 days/week)"
    VERY_ACTIVE = "Very active (hard exercise 6-7 days/week)"
    EXTRA_ACTIVE = "Extremely active (physical job or very hard training)"


class Goal(str, Enum):
    WEIGHT_LOSS = "Accelerated Weight Loss"
    MAINTENANCE = "Weight Maintenance"
    MUSCLE_GAIN = "Lean Mass Gain"
    METABOLIC_HEALTH = "Metabolic/Glycemic Control"


# =============================================================================
# BASE
# =============================================================================
class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# USER PROFILE
# =============================================================================
class UserProfile(CamelModel):
    """Working draft collected by the wizard."""
    name: str = ""
    age: int = Field(30, ge=0, le=130)
    gender: Gender = Gender.FEMALE
    height: float = Field(165, ge=0, description="Height in cm")
    current_weight: float = Field(80, alias="currentWeight", ge=0, description="kg")
    goal_weight: float = Field(65, alias="goalWeight", ge=0, description="kg")
    activity_level: ActivityLevel = Field(ActivityLevel.LIGHT, alias="activityLevel")
    goal: Goal = Goal.WEIGHT_LOSS
    dietary_restrictions: str = Field("", alias="dietaryRestrictions")
    water_intake: str = Field("2L", alias="waterIntake")


# =============================================================================
# GENERATED PLAN
# =============================================================================
class Meal(CamelModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str
    calories: int = Field(..., ge=0, strict=True)
    protein: str = Field(..., strict=True, description="Free text, e.g. '30g'")


MEAL_LABELS: Tuple[Tuple[str, str], ...] = (
    ("breakfast", "Breakfast"),
    ("lunch", "Lunch"),
    ("snack", "Snack"),
    ("dinner", "Dinner"),
)


class DailyPlan(CamelModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    day: str
    theme: str
    total_calories: int = Field(..., alias="totalCalories", ge=0, strict=True)
    breakfast: Meal
    lunch: Meal
    snack: Meal
    dinner: Meal
    hydration_tip: str = Field(..., alias="hydrationTip")
    exercise_suggestion: str = Field(..., alias="exerciseSuggestion")

    def meals(self) -> List[Tuple[str, Meal]]:
        """Ordered (label, meal) pairs."""
        return [(label, getattr(self, key)) for key, label in MEAL_LABELS]

    @property
    def meal_calorie_sum(self) -> int:
        return sum(meal.calories for _, meal in self.meals())


PLAN_DAYS = 7


class GeneratedPlan(CamelModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    summary: str
    nutritional_strategy: str = Field(..., alias="nutritionalStrategy")
    side_effect_management: str = Field(..., alias="sideEffectManagement")
    daily_plans: List[DailyPlan] = Field(
        ..., alias="dailyPlans", min_length=PLAN_DAYS, max_length=PLAN_DAYS
    )


# =============================================================================
# CHAT
# =============================================================================
class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    text: str


# =============================================================================
# PROGRESS
# =============================================================================
PHOTO_SLOTS = ("front", "back", "side")


class ProgressPhotos(CamelModel):
    front: Optional[str] = None
    back: Optional[str] = None
    side: Optional[str] = None

    def attached(self) -> List[Tuple[str, str]]:
        return [(slot, getattr(self, slot)) for slot in PHOTO_SLOTS if getattr(self, slot)]


class ProgressEntry(CamelModel):
    id: str
    date: str
    weight: float
    notes: Optional[str] = None
    photos: Optional[ProgressPhotos] = None
