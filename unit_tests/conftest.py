import copy
import io
import json
import sys
from pathlib import Path

import pytest

# Add root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _meal(name, calories, protein="25g"):
    return {
        "name": name,
        "description": f"{name} prepared simply",
        "calories": calories,
        "protein": protein,
    }


def build_plan_payload():
    """Valid 7-day plan as the provider would return it."""
    daily = []
    for i, day in enumerate(DAYS):
        meals = {
            "breakfast": _meal(f"Oat Bowl {i + 1}", 350),
            "lunch": _meal(f"Chicken Salad {i + 1}", 550, "40g"),
            "snack": _meal(f"Greek Yogurt {i + 1}", 150, "15g"),
            "dinner": _meal(f"Baked Salmon {i + 1}", 500, "35g"),
        }
        daily.append({
            "day": day,
            "theme": "High Protein" if i % 2 == 0 else "Recovery",
            "totalCalories": 1550,
            **meals,
            "hydrationTip": "Drink a glass of water before each meal",
            "exerciseSuggestion": "30 minute brisk walk",
        })
    return {
        "summary": "A balanced week focused on protein and hydration.",
        "nutritionalStrategy": "Moderate deficit with high protein and fibre.",
        "sideEffectManagement": "Eat slowly and keep a regular sleep schedule.",
        "dailyPlans": daily,
    }


class MockResponse:
    def __init__(self, text):
        self.text = text


class MockModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error:
            raise self.error
        return MockResponse(self.text)


class MockChat:
    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.sent = []

    def send_message(self, message):
        self.sent.append(message)
        if self.error:
            raise self.error
        return MockResponse(self.replies.pop(0) if self.replies else "ok")


class MockChats:
    def __init__(self, chat):
        self.chat = chat
        self.created = []

    def create(self, model, config=None):
        self.created.append({"model": model, "config": config})
        return self.chat


class MockGeminiClient:
    """Mimics the parts of google.genai.Client the app uses."""

    def __init__(self, text=None, error=None, chat=None):
        self.models = MockModels(text, error)
        self.chats = MockChats(chat or MockChat())


@pytest.fixture
def plan_payload():
    return copy.deepcopy(build_plan_payload())


@pytest.fixture
def plan(plan_payload):
    from agents.schemas import GeneratedPlan
    return GeneratedPlan.model_validate(plan_payload)


@pytest.fixture
def profile():
    from agents.schemas import UserProfile
    return UserProfile(name="Ana", age=34, height=168, current_weight=82, goal_weight=70)


@pytest.fixture
def mock_client_factory():
    return MockGeminiClient


@pytest.fixture
def store(tmp_path):
    from memory.local_store import LocalStore
    return LocalStore(str(tmp_path / "local_storage.json"))


@pytest.fixture
def progress_log(store):
    from memory.progress_log import ProgressLog
    return ProgressLog(store)


def make_image_bytes(size=(1600, 1200), mode="RGB", fmt="PNG"):
    from PIL import Image
    color = (200, 120, 40, 128) if mode == "RGBA" else (200, 120, 40)
    buf = io.BytesIO()
    Image.new(mode, size, color=color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def image_bytes():
    return make_image_bytes


@pytest.fixture
def plan_json(plan_payload):
    return json.dumps(plan_payload)


@pytest.fixture
def mock_chat_factory():
    return MockChat
